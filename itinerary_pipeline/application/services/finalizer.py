"""Replacement of a job's itinerary items."""

from itinerary_pipeline.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DocumentDBError,
)
from itinerary_pipeline.commons.telemetry import get_logger, timed
from itinerary_pipeline.domain.exceptions import PersistenceError
from itinerary_pipeline.domain.models import PlaceDraft, PlaceItem

# Gap between consecutive items so manual reordering needs no renumbering
ORDER_INDEX_STEP = 10


class PersistenceFinalizer:
    """Soft-replaces the visible place items of a job.

    Previously visible items are soft-deleted first, then the new set is
    inserted in one all-or-nothing batch. If the insert fails the job is left
    with no visible items until it is reprocessed.
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        collection: str = "place_items",
    ) -> None:
        self._db = document_db
        self._collection = collection
        self._logger = get_logger(__name__)

    @timed
    async def replace_items(self, job_id: str, drafts: list[PlaceDraft]) -> int:
        """Store ``drafts`` as the job's itinerary.

        Args:
            job_id: Owning job.
            drafts: Validated places in itinerary order.

        Returns:
            Number of items inserted.

        Raises:
            PersistenceError: If the old items could not be hidden or the new
                ones could not be inserted.
        """
        try:
            hidden = await self._db.update_many(
                self._collection,
                {"job_id": job_id, "is_deleted": False},
                {"is_deleted": True},
            )
        except Exception as e:
            raise PersistenceError(job_id, f"soft delete failed: {e}") from e

        items = [
            PlaceItem.from_draft(job_id, draft, order_index=(i + 1) * ORDER_INDEX_STEP)
            for i, draft in enumerate(drafts)
        ]
        try:
            await self._db.insert_many(
                self._collection,
                [item.model_dump(mode="json") for item in items],
            )
        except DocumentDBError as e:
            raise PersistenceError(job_id, str(e)) from e

        self._logger.info(
            "Place items replaced",
            extra={"job_id": job_id, "hidden_count": hidden, "inserted_count": len(items)},
        )
        return len(items)
