"""Centralized initialization and deinitialization for the API."""

from fastapi import FastAPI

from .mongo import init_mongo, deinit_mongo


async def init(app: FastAPI) -> None:
    """Initialize all components during app startup."""
    await init_mongo(app)


async def deinit(app: FastAPI) -> None:
    """Deinitialize all components during app shutdown."""
    await deinit_mongo(app)
