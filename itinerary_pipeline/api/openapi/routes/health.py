"""Health check endpoints."""

from enum import Enum

from fastapi import APIRouter
from pydantic import BaseModel, Field

from itinerary_pipeline.api.dependencies import FactoryDep, SettingsDep

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    message: str | None = Field(default=None, description="Additional details")
    latency_ms: float | None = Field(default=None, description="Check latency")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(description="Whether the service is ready to accept requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Get overall health status of the service and its components.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> HealthResponse:
    """Check the document store and the configured providers."""
    components: list[ComponentHealth] = []

    try:
        db_health = await factory.get_document_db().health_check()
        components.append(
            ComponentHealth(
                name="document_db",
                status=HealthStatus.HEALTHY if db_health.healthy else HealthStatus.UNHEALTHY,
                message=db_health.message,
                latency_ms=round(db_health.latency_ms, 2),
            )
        )
    except Exception as e:
        components.append(
            ComponentHealth(
                name="document_db",
                status=HealthStatus.UNHEALTHY,
                message=str(e),
            )
        )

    try:
        analyzer = factory.get_video_analyzer()
        configured = bool(settings.video_ai.api_key)
        components.append(
            ComponentHealth(
                name="video_ai",
                status=HealthStatus.HEALTHY if configured else HealthStatus.DEGRADED,
                message=(
                    f"Model: {analyzer.model_name}"
                    if configured
                    else "API key not configured"
                ),
            )
        )
    except Exception as e:
        components.append(
            ComponentHealth(
                name="video_ai",
                status=HealthStatus.UNHEALTHY,
                message=str(e),
            )
        )

    try:
        factory.get_metadata_fetcher()
        components.append(
            ComponentHealth(
                name="metadata_fetcher",
                status=HealthStatus.HEALTHY,
                message=f"Provider: {settings.youtube.provider}",
            )
        )
    except Exception as e:
        components.append(
            ComponentHealth(
                name="metadata_fetcher",
                status=HealthStatus.UNHEALTHY,
                message=str(e),
            )
        )

    # Nothing works without the store; other components only degrade
    statuses = {c.name: c.status for c in components}
    if statuses.get("document_db") == HealthStatus.UNHEALTHY:
        overall_status = HealthStatus.UNHEALTHY
    elif any(s != HealthStatus.HEALTHY for s in statuses.values()):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.HEALTHY

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Simple liveness check for Kubernetes probes.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check for Kubernetes probes.",
)
async def readiness(
    factory: FactoryDep,
) -> ReadinessResponse:
    """Check if the service can accept invocations."""
    checks: dict[str, bool] = {}

    try:
        db_health = await factory.get_document_db().health_check()
        checks["document_db"] = db_health.healthy
    except Exception:
        checks["document_db"] = False

    try:
        factory.get_video_analyzer()
        checks["video_ai"] = True
    except Exception:
        checks["video_ai"] = False

    try:
        factory.get_continuation_trigger()
        checks["continuation"] = True
    except Exception:
        checks["continuation"] = False

    return ReadinessResponse(ready=all(checks.values()), checks=checks)
