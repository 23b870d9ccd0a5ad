"""Store connection lifecycle."""

import logging

from fastapi import FastAPI
from pymongo.errors import ConnectionFailure

from ..mongo.client import MongoStore
from ..mongo.models import MODELS

logger = logging.getLogger(__name__)


async def init_mongo(app: FastAPI) -> None:
    """
    Open the store (unless one was injected) and create model indexes.

    An unreachable server does not stop startup: index creation is skipped
    and requests report the store as unavailable until it comes back.
    """
    settings = app.state.settings
    if getattr(app.state, "mongo_store", None) is None:
        app.state.mongo_store = MongoStore.connect(
            settings.mongo_uri,
            settings.mongo_database,
            timeout_ms=settings.mongo_timeout_ms,
        )
        app.state.owns_mongo_store = True
        logger.info(f"Connected to MongoDB database '{settings.mongo_database}'")

    store = app.state.mongo_store
    try:
        for model in MODELS:
            await model.ensure_indexes(store)
    except ConnectionFailure:
        logger.exception("Could not create indexes, MongoDB is unreachable")


async def deinit_mongo(app: FastAPI) -> None:
    store = getattr(app.state, "mongo_store", None)
    if store is not None and getattr(app.state, "owns_mongo_store", False):
        store.close()
        app.state.mongo_store = None
        logger.info("Closed MongoDB connection")
