"""Continuation over HTTP: POST to this service's own process endpoint."""

import httpx

from itinerary_pipeline.commons.telemetry import get_correlation_id, get_logger
from itinerary_pipeline.infrastructure.continuation.base import (
    ContinuationTriggerBase,
)

logger = get_logger(__name__)


class HttpContinuationTrigger(ContinuationTriggerBase):
    """Sends the resume request to ``{base_url}{api_prefix}/jobs/{id}/process``.

    The endpoint answers 202 as soon as the work is queued, so the request
    only waits for acceptance, not for the next invocation to finish.
    """

    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/v1",
        auth_token: str = "",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the trigger.

        Args:
            base_url: Root URL of the service.
            api_prefix: API route prefix.
            auth_token: Optional bearer token sent with the request.
            timeout_seconds: Request timeout.
            transport: Optional httpx transport (used by tests).
        """
        headers = {"Content-Type": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"
        self._api_prefix = api_prefix.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def trigger(self, job_id: str, resume_chunk_index: int) -> None:
        url = f"{self._api_prefix}/jobs/{job_id}/process"
        correlation_id = get_correlation_id()
        headers = {"X-Request-ID": correlation_id} if correlation_id else None
        try:
            response = await self._client.post(
                url,
                json={"resume_chunk_index": resume_chunk_index},
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(
                "Continuation request failed",
                extra={
                    "job_id": job_id,
                    "resume_chunk_index": resume_chunk_index,
                    "error": str(e),
                },
            )
            return

        if not response.is_success:
            logger.error(
                "Continuation request rejected",
                extra={
                    "job_id": job_id,
                    "resume_chunk_index": resume_chunk_index,
                    "status_code": response.status_code,
                },
            )
            return

        logger.info(
            "Continuation triggered",
            extra={"job_id": job_id, "resume_chunk_index": resume_chunk_index},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
