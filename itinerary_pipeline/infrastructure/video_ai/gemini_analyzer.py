"""Gemini implementation of the video analyzer."""

import asyncio
import json
import re
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from itinerary_pipeline.commons.telemetry import (
    end_generation,
    get_logger,
    start_generation,
    timed,
)
from itinerary_pipeline.domain.models import ChunkWindow, ExtractedPlace
from itinerary_pipeline.infrastructure.video_ai.base import (
    ChunkAnalysis,
    VideoAnalyzerBase,
)

logger = get_logger(__name__)

EXTRACTION_PROMPT = """You are an expert at analyzing travel videos. Watch this \
segment of the YouTube video and extract every travel place that is visited or \
recommended.

## Rules
1. category: "TNA" (sights, restaurants, activities) or "LODGING" (accommodation)
2. youtuber_comment: one short line, at most 50 characters
3. Skip places already listed in this answer
4. Use specific place names (e.g. "Fushimi Inari Taisha", "Ichiran Ramen")
5. timeline_start_sec / timeline_end_sec are seconds from the start of this segment

## Example
{
  "plan_title": "Kyoto 3 nights 4 days",
  "places": [
    {
      "place_name": "Fushimi Inari Taisha",
      "category": "TNA",
      "timeline_start_sec": 120,
      "country": "Japan",
      "city": "Kyoto",
      "youtuber_comment": "Endless red torii gates, open 24 hours"
    }
  ]
}"""

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "plan_title": {"type": "string", "maxLength": 50},
        "places": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "place_name": {"type": "string", "maxLength": 100},
                    "category": {"type": "string", "enum": ["TNA", "LODGING"]},
                    "timeline_start_sec": {"type": "integer"},
                    "timeline_end_sec": {"type": "integer"},
                    "country": {"type": "string", "maxLength": 20},
                    "city": {"type": "string", "maxLength": 30},
                    "youtuber_comment": {"type": "string", "maxLength": 80},
                    "confidence": {"type": "number"},
                },
                "required": ["place_name", "category"],
            },
        },
    },
    "required": ["plan_title", "places"],
}

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class PayloadParseError(Exception):
    """Raised when the model output is not a usable analysis payload."""


class _AnalysisEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    plan_title: str = ""
    places: list[Any] | None = None

    @field_validator("plan_title", mode="before")
    @classmethod
    def _title_or_empty(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("places", mode="before")
    @classmethod
    def _list_or_none(cls, v: Any) -> list[Any] | None:
        return v if isinstance(v, list) else None


def parse_analysis_payload(text: str) -> ChunkAnalysis:
    """Parse model output into an analysis.

    Records that do not match the place schema are dropped individually. An
    envelope without a places array is a valid, empty analysis.

    Raises:
        PayloadParseError: If the text is not a string, is empty, or is not a
            JSON object.
    """
    if not isinstance(text, str):
        raise PayloadParseError(f"Expected text, got {type(text).__name__}")
    json_text = text.strip()
    fenced = _CODE_FENCE.search(json_text)
    if fenced:
        json_text = fenced.group(1).strip()
    if not json_text:
        raise PayloadParseError("Empty payload")

    try:
        raw = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise PayloadParseError(f"Invalid JSON: {e}") from e

    try:
        envelope = _AnalysisEnvelope.model_validate(raw)
    except ValidationError as e:
        raise PayloadParseError(f"Unexpected payload shape: {e}") from e

    places: list[ExtractedPlace] = []
    for record in envelope.places or []:
        try:
            places.append(ExtractedPlace.model_validate(record))
        except ValidationError:
            logger.warning("Dropping malformed place record", extra={"record": record})

    return ChunkAnalysis(plan_title=envelope.plan_title, places=places)


class GeminiVideoAnalyzer(VideoAnalyzerBase):
    """Calls Gemini ``generateContent`` with a YouTube file URI and offsets.

    Overload (503) and rate limit (429) responses, as well as transport
    errors, are retried with a linearly increasing delay. Everything else is
    reported once and the window is given up.
    """

    _RETRYABLE_STATUS: ClassVar[frozenset[int]] = frozenset({429, 503})

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        temperature: float = 0.2,
        max_output_tokens: int = 8192,
        max_retries: int = 3,
        retry_delay_seconds: float = 2.0,
        timeout_seconds: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key.
            model: Model name.
            base_url: API root URL.
            temperature: Sampling temperature.
            max_output_tokens: Output token cap.
            max_retries: Attempts per window, including the first.
            retry_delay_seconds: Base delay; attempt N waits N times this.
            timeout_seconds: Request timeout.
            transport: Optional httpx transport (used by tests).
            sleep: Awaitable sleep used between retries.
        """
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._max_retries = max_retries
        self._retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @property
    def model_name(self) -> str:
        return self._model

    def _build_request(self, source_url: str, window: ChunkWindow) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {
                            "file_data": {"file_uri": source_url},
                            "video_metadata": {
                                "start_offset": f"{window.start_sec}s",
                                "end_offset": f"{window.end_sec}s",
                            },
                        },
                        {"text": EXTRACTION_PROMPT},
                    ]
                }
            ],
            "generationConfig": {
                "temperature": self._temperature,
                "maxOutputTokens": self._max_output_tokens,
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    @timed
    async def analyze_chunk(
        self,
        source_url: str,
        window: ChunkWindow,
    ) -> ChunkAnalysis | None:
        if not self._api_key:
            logger.error("Gemini API key not configured")
            return None

        body = self._build_request(source_url, window)
        generation = start_generation(
            name="analyze_chunk",
            model=self._model,
            input_payload={"source_url": source_url, "window": window.label},
            metadata={"chunk_index": window.index},
        )

        for attempt in range(1, self._max_retries + 1):
            logger.debug(
                "Analyzing chunk",
                extra={
                    "chunk_index": window.index,
                    "window": window.label,
                    "attempt": attempt,
                    "max_retries": self._max_retries,
                },
            )
            try:
                response = await self._client.post(
                    f"/models/{self._model}:generateContent",
                    headers={"x-goog-api-key": self._api_key},
                    json=body,
                )
            except httpx.TransportError as e:
                logger.warning(
                    "Gemini request failed",
                    extra={"chunk_index": window.index, "attempt": attempt, "error": str(e)},
                )
                if attempt < self._max_retries:
                    await self._sleep(self._retry_delay_seconds * attempt)
                continue

            if (
                response.status_code in self._RETRYABLE_STATUS
                and attempt < self._max_retries
            ):
                wait = self._retry_delay_seconds * attempt
                logger.warning(
                    "Gemini overloaded, retrying",
                    extra={
                        "chunk_index": window.index,
                        "status_code": response.status_code,
                        "retry_in_seconds": wait,
                    },
                )
                await self._sleep(wait)
                continue

            result = self._handle_response(response, window)
            end_generation(
                generation,
                output=None if result is None else len(result.places),
                level="DEFAULT" if result is not None else "ERROR",
            )
            return result

        logger.warning("All attempts failed for chunk", extra={"chunk_index": window.index})
        end_generation(generation, output=None, level="ERROR", status_message="retries exhausted")
        return None

    def _handle_response(
        self,
        response: httpx.Response,
        window: ChunkWindow,
    ) -> ChunkAnalysis | None:
        if not response.is_success:
            logger.error(
                "Gemini API error",
                extra={
                    "chunk_index": window.index,
                    "status_code": response.status_code,
                    "body": response.text[:500],
                },
            )
            return None

        try:
            data = response.json()
            candidate = (data.get("candidates") or [{}])[0]
            text = candidate["content"]["parts"][0]["text"]
            if not isinstance(text, str):
                raise TypeError("text part is not a string")
        except (ValueError, AttributeError, KeyError, IndexError, TypeError):
            logger.warning(
                "No text in Gemini response",
                extra={"chunk_index": window.index, "body": response.text[:500]},
            )
            return None

        try:
            analysis = parse_analysis_payload(text)
        except PayloadParseError as e:
            logger.error(
                "Could not parse Gemini payload",
                extra={
                    "chunk_index": window.index,
                    "error": str(e),
                    "raw_response": str(text)[:500],
                },
            )
            return None

        logger.info(
            "Chunk analyzed",
            extra={"chunk_index": window.index, "place_count": len(analysis.places)},
        )
        return analysis

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
