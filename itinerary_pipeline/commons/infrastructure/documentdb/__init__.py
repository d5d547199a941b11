"""Document database abstractions and implementations."""

from itinerary_pipeline.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DocumentDBError,
    HealthStatus,
)
from itinerary_pipeline.commons.infrastructure.documentdb.mongodb_provider import (
    MongoDBDocumentDB,
)

__all__ = [
    # Base classes
    "DocumentDBBase",
    "DocumentDBError",
    "HealthStatus",
    # Implementations
    "MongoDBDocumentDB",
]
