"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class DocumentDBError(Exception):
    """Raised when a write could not be applied as a whole."""


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Documents carry their identity in an ``id`` field. Every single-document
    write must be atomic, since job state is shared between invocations only
    through the job document.
    """

    @abstractmethod
    async def insert_many(
        self,
        collection: str,
        documents: list[dict[str, Any]],
    ) -> list[str]:
        """Insert multiple documents, all or nothing.

        Args:
            collection: Collection name.
            documents: Documents to insert.

        Returns:
            Inserted document IDs, in input order.

        Raises:
            DocumentDBError: If any document failed; none remain inserted.
        """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Args:
            collection: Collection name.
            document_id: Document ID to find.

        Returns:
            Document if found, None otherwise.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching equality filters.

        Args:
            collection: Collection name.
            filters: Field equality filters.
            skip: Number of documents to skip.
            limit: Maximum documents to return.
            sort: Sort specification [(field, direction)], 1 asc / -1 desc.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        """Set fields on one document.

        Returns:
            True if the document exists, False otherwise.
        """

    @abstractmethod
    async def update_where(
        self,
        collection: str,
        document_id: str,
        expected: dict[str, list[Any]],
        updates: dict[str, Any],
    ) -> bool:
        """Atomically set fields on one document if it is in an expected state.

        Args:
            collection: Collection name.
            document_id: Document ID to update.
            expected: Field name to allowed values; every field must match.
            updates: Fields to set.

        Returns:
            True if the document matched and was updated, False otherwise.
        """

    @abstractmethod
    async def update_many(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
    ) -> int:
        """Set fields on every document matching equality filters.

        Returns:
            Count of matched documents.
        """

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection and return its name."""

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health."""
