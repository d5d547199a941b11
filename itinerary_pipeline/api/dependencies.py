"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from itinerary_pipeline.application.dtos.extraction import (
    ProcessJobRequest,
    ProcessJobResult,
)
from itinerary_pipeline.application.services.extraction import ExtractionService
from itinerary_pipeline.commons.settings.loader import get_settings as _load_settings
from itinerary_pipeline.commons.settings.models import Settings
from itinerary_pipeline.commons.telemetry import get_logger
from itinerary_pipeline.infrastructure.continuation import LocalContinuationTrigger
from itinerary_pipeline.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

logger = get_logger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers.

    Args:
        settings: Application settings.

    Returns:
        Configured infrastructure factory.
    """
    return get_factory(settings)


def build_extraction_service(
    factory: InfrastructureFactory,
    settings: Settings,
) -> ExtractionService:
    """Create the extraction service and wire local continuations to it."""
    trigger = factory.get_continuation_trigger()
    service = ExtractionService(
        document_db=factory.get_document_db(),
        metadata_fetcher=factory.get_metadata_fetcher(),
        video_analyzer=factory.get_video_analyzer(),
        continuation_trigger=trigger,
        settings=settings,
    )

    if isinstance(trigger, LocalContinuationTrigger):

        async def _resume(job_id: str, resume_chunk_index: int) -> ProcessJobResult:
            return await service.process(
                ProcessJobRequest(job_id=job_id, resume_chunk_index=resume_chunk_index)
            )

        trigger.bind(_resume)

    return service


def get_extraction_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ExtractionService:
    """Get extraction service with all dependencies.

    Args:
        factory: Infrastructure factory.
        settings: Application settings.

    Returns:
        Configured extraction service.
    """
    return build_extraction_service(factory, settings)


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
ExtractionServiceDep = Annotated[ExtractionService, Depends(get_extraction_service)]


async def init_services(settings: Settings) -> None:
    """Initialize infrastructure services on startup.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    # Pre-initialize providers to fail fast on bad configuration
    document_db = factory.get_document_db()
    factory.get_metadata_fetcher()
    factory.get_video_analyzer()
    factory.get_continuation_trigger()

    collections = settings.document_db.collections
    try:
        await document_db.create_index(
            collections.place_items,
            [("job_id", 1), ("is_deleted", 1), ("order_index", 1)],
            name="job_visible_order",
        )
        await document_db.create_index(
            collections.jobs,
            [("status", 1)],
            name="job_status",
        )
    except Exception as e:
        logger.warning("Could not create indexes", extra={"error": str(e)})


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        logger.debug("Factory was never initialized")
    finally:
        reset_factory()
        get_settings.cache_clear()
