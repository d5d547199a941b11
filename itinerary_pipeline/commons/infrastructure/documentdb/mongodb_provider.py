"""MongoDB implementation of document database."""

import time
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from itinerary_pipeline.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DocumentDBError,
    HealthStatus,
)
from itinerary_pipeline.commons.telemetry import get_logger

logger = get_logger(__name__)


def _to_mongo(document: dict[str, Any]) -> dict[str, Any]:
    """Store the domain 'id' as MongoDB's '_id'."""
    doc = document.copy()
    if "id" in doc:
        doc["_id"] = doc.pop("id")
    return doc


def _from_mongo(document: dict[str, Any]) -> dict[str, Any]:
    """Restore the domain 'id' from MongoDB's '_id'."""
    doc = dict(document)
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB implementation of document database.

    Uses Motor for async operations. Single-document updates are atomic in
    MongoDB, which is what the conditional job claim relies on.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
    ) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name

    async def insert_many(
        self,
        collection: str,
        documents: list[dict[str, Any]],
    ) -> list[str]:
        """Insert documents; on partial failure remove the ones that landed.

        IDs are assigned before the write so a failed batch can be rolled back
        without a multi-document transaction.
        """
        if not documents:
            return []

        docs = [_to_mongo(document) for document in documents]
        for doc in docs:
            doc.setdefault("_id", ObjectId())
        ids = [doc["_id"] for doc in docs]

        try:
            await self._db[collection].insert_many(docs, ordered=True)
        except PyMongoError as e:
            logger.error(
                "Bulk insert failed, rolling back",
                extra={"collection": collection, "document_count": len(docs)},
            )
            try:
                await self._db[collection].delete_many({"_id": {"$in": ids}})
            except PyMongoError:
                logger.exception(
                    "Rollback of partial bulk insert failed",
                    extra={"collection": collection},
                )
            raise DocumentDBError(f"Bulk insert into {collection} failed: {e}") from e

        return [str(id_) for id_ in ids]

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        doc = await self._db[collection].find_one({"_id": document_id})
        return _from_mongo(doc) if doc else None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        cursor = self._db[collection].find(_to_mongo(filters))
        if sort:
            cursor = cursor.sort(sort)
        cursor = cursor.skip(skip).limit(limit)
        return [_from_mongo(doc) async for doc in cursor]

    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        result = await self._db[collection].update_one(
            {"_id": document_id},
            {"$set": _to_mongo(updates)},
        )
        return bool(result.matched_count > 0)

    async def update_where(
        self,
        collection: str,
        document_id: str,
        expected: dict[str, list[Any]],
        updates: dict[str, Any],
    ) -> bool:
        """Compare-and-set on one document via a filtered ``update_one``."""
        query: dict[str, Any] = {"_id": document_id}
        for field_name, allowed in expected.items():
            query[field_name] = {"$in": list(allowed)}

        result = await self._db[collection].update_one(
            query,
            {"$set": _to_mongo(updates)},
        )
        return bool(result.matched_count > 0)

    async def update_many(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
    ) -> int:
        result = await self._db[collection].update_many(
            _to_mongo(filters),
            {"$set": updates},
        )
        return int(result.matched_count)

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        if filters:
            return int(await self._db[collection].count_documents(_to_mongo(filters)))
        return int(await self._db[collection].estimated_document_count())

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        index_name = await self._db[collection].create_index(
            fields,
            unique=unique,
            name=name,
        )
        return str(index_name)

    async def health_check(self) -> HealthStatus:
        start = time.perf_counter()
        try:
            await self._client.admin.command("ping")
        except Exception as e:
            return HealthStatus(
                healthy=False,
                latency_ms=(time.perf_counter() - start) * 1000,
                message=f"MongoDB health check failed: {e}",
                details={"database": self._database_name, "error": str(e)},
            )
        return HealthStatus(
            healthy=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            message="MongoDB is healthy",
            details={"database": self._database_name},
        )

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
