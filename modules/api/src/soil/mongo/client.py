"""
Thin MongoDB layer shared by all routers.

`MongoStore` owns the driver client and hands out collections. `MongoModel`
is the base class for every stored document: it maps between pydantic models
(camelCase JSON, string ids) and raw documents (ObjectId `_id`) and exposes
the CRUD operations the routers need as class methods.
"""

import logging
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound="MongoModel")

SortSpec = Sequence[Tuple[str, int]]


class MongoStore:
    """Wraps a motor client (or a compatible one) bound to a single database."""

    def __init__(self, client, database_name: str):
        self.client = client
        self.database_name = database_name
        self.db = client[database_name]

    @classmethod
    def connect(cls, uri: str, database_name: str, timeout_ms: int = 5000) -> "MongoStore":
        from motor.motor_asyncio import AsyncIOMotorClient

        client = AsyncIOMotorClient(uri, serverSelectionTimeoutMS=timeout_ms)
        return cls(client, database_name)

    def collection(self, name: str):
        return self.db[name]

    async def ping(self) -> None:
        await self.client.admin.command("ping")

    def close(self) -> None:
        self.client.close()


def is_valid_id(value: Optional[str]) -> bool:
    return bool(value) and ObjectId.is_valid(value)


class MongoModel(BaseModel):
    """
    Base for stored documents.

    Subclasses get:
    - Auto-derived collection name (class name without "Model") unless
      `collection_name` is set
    - CRUD operations as class methods: get(), find(), find_one(), insert(),
      replace(), delete(), count(), aggregate()
    - Index bootstrap from the `indexes` class variable
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    collection_name: ClassVar[Optional[str]] = None
    # (keys, options) pairs passed to create_index at startup
    indexes: ClassVar[List[Tuple[List[Tuple[str, int]], Dict[str, Any]]]] = []

    id: Optional[str] = None

    @classmethod
    def _get_collection_name(cls) -> str:
        if cls.collection_name:
            return cls.collection_name
        name = cls.__name__
        if name.endswith("Model"):
            name = name[: -len("Model")]
        return name.lower()

    @classmethod
    def _collection(cls, store: MongoStore):
        return store.collection(cls._get_collection_name())

    @classmethod
    def from_document(cls: Type[ModelT], doc: Mapping[str, Any]) -> ModelT:
        data = dict(doc)
        raw_id = data.pop("_id", None)
        if raw_id is not None:
            data["id"] = str(raw_id)
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(by_alias=True, exclude={"id"})
        if self.id:
            doc["_id"] = ObjectId(self.id)
        return doc

    @classmethod
    async def ensure_indexes(cls, store: MongoStore) -> None:
        collection = cls._collection(store)
        for keys, options in cls.indexes:
            await collection.create_index(keys, **options)

    @classmethod
    async def get(cls: Type[ModelT], store: MongoStore, doc_id: str) -> Optional[ModelT]:
        doc = await cls._collection(store).find_one({"_id": ObjectId(doc_id)})
        return cls.from_document(doc) if doc else None

    @classmethod
    async def find_one(cls: Type[ModelT], store: MongoStore, query: Mapping[str, Any]) -> Optional[ModelT]:
        doc = await cls._collection(store).find_one(dict(query))
        return cls.from_document(doc) if doc else None

    @classmethod
    async def find(
        cls: Type[ModelT],
        store: MongoStore,
        query: Optional[Mapping[str, Any]] = None,
        sort: Optional[SortSpec] = None,
    ) -> List[ModelT]:
        cursor = cls._collection(store).find(dict(query or {}), sort=list(sort) if sort else None)
        docs = await cursor.to_list(length=None)
        return [cls.from_document(doc) for doc in docs]

    @classmethod
    async def count(cls, store: MongoStore, query: Optional[Mapping[str, Any]] = None) -> int:
        return await cls._collection(store).count_documents(dict(query or {}))

    @classmethod
    async def aggregate(cls, store: MongoStore, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        cursor = cls._collection(store).aggregate(pipeline)
        return await cursor.to_list(length=None)

    async def insert(self: ModelT, store: MongoStore) -> ModelT:
        """Insert this document, assigning a fresh id when it has none."""
        if not self.id:
            self.id = str(ObjectId())
        await self._collection(store).insert_one(self.to_document())
        return self

    async def replace(self, store: MongoStore) -> bool:
        """Replace the stored document with the same id. Returns False if none matched."""
        result = await self._collection(store).replace_one({"_id": ObjectId(self.id)}, self.to_document())
        return result.matched_count > 0

    @classmethod
    async def delete(cls, store: MongoStore, doc_id: str) -> bool:
        result = await cls._collection(store).delete_one({"_id": ObjectId(doc_id)})
        return result.deleted_count > 0
