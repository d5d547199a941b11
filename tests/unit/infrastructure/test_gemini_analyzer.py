"""Unit tests for the Gemini video analyzer."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from itinerary_pipeline.domain.models import ChunkWindow
from itinerary_pipeline.infrastructure.video_ai.gemini_analyzer import (
    GeminiVideoAnalyzer,
    PayloadParseError,
    parse_analysis_payload,
)

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
WINDOW = ChunkWindow(index=1, start_sec=300, end_sec=600)


def _gemini_response(payload: object, status_code: int = 200) -> httpx.Response:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return httpx.Response(
        status_code,
        json={"candidates": [{"content": {"parts": [{"text": text}]}}]},
    )


def _analyzer(handler, sleep=None, api_key="test-key") -> GeminiVideoAnalyzer:
    return GeminiVideoAnalyzer(
        api_key=api_key,
        transport=httpx.MockTransport(handler),
        sleep=sleep or AsyncMock(),
    )


VALID_PAYLOAD = {
    "plan_title": "Kyoto day trip",
    "places": [
        {"place_name": "Fushimi Inari", "category": "TNA", "timeline_start_sec": 12},
        {"place_name": "Hotel Granvia", "category": "LODGING"},
    ],
}


class TestParseAnalysisPayload:
    """Tests for parse_analysis_payload."""

    def test_plain_json(self):
        analysis = parse_analysis_payload(json.dumps(VALID_PAYLOAD))

        assert analysis.plan_title == "Kyoto day trip"
        assert [p.place_name for p in analysis.places] == ["Fushimi Inari", "Hotel Granvia"]
        assert analysis.places[0].timeline_start_sec == 12

    def test_code_fence_is_stripped(self):
        text = f"Here you go:\n```json\n{json.dumps(VALID_PAYLOAD)}\n```"
        assert len(parse_analysis_payload(text).places) == 2

    def test_malformed_records_dropped(self):
        payload = {
            "plan_title": "x",
            "places": [
                {"category": "TNA"},
                "not an object",
                {"place_name": "Gion", "timeline_start_sec": "later"},
            ],
        }

        analysis = parse_analysis_payload(json.dumps(payload))

        assert [p.place_name for p in analysis.places] == ["Gion"]
        assert analysis.places[0].timeline_start_sec is None

    def test_missing_places_is_empty(self):
        analysis = parse_analysis_payload('{"plan_title": 42}')
        assert analysis.plan_title == ""
        assert analysis.places == []

    @pytest.mark.parametrize(
        "text", ["", "   ", "not json", "[1, 2]", "```json\n```", 42, None]
    )
    def test_unusable_payload(self, text):
        with pytest.raises(PayloadParseError):
            parse_analysis_payload(text)


class TestGeminiVideoAnalyzer:
    """Tests for GeminiVideoAnalyzer."""

    async def test_request_shape(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return _gemini_response(VALID_PAYLOAD)

        analyzer = _analyzer(handler)
        analysis = await analyzer.analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is not None
        assert len(analysis.places) == 2
        request = requests[0]
        assert request.url.path.endswith("/models/gemini-2.5-flash:generateContent")
        assert request.headers["x-goog-api-key"] == "test-key"
        body = json.loads(request.content)
        video_part = body["contents"][0]["parts"][0]
        assert video_part["file_data"]["file_uri"] == VIDEO_URL
        assert video_part["video_metadata"] == {"start_offset": "300s", "end_offset": "600s"}
        assert body["generationConfig"]["responseMimeType"] == "application/json"
        await analyzer.close()

    async def test_retries_overload_with_linear_backoff(self):
        statuses = iter([503, 429])

        def handler(request: httpx.Request) -> httpx.Response:
            status = next(statuses, 200)
            if status != 200:
                return httpx.Response(status, json={"error": "busy"})
            return _gemini_response(VALID_PAYLOAD)

        sleep = AsyncMock()
        analysis = await _analyzer(handler, sleep=sleep).analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is not None
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0]

    async def test_gives_up_after_max_retries(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(503)

        sleep = AsyncMock()
        analysis = await _analyzer(handler, sleep=sleep).analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is None
        assert calls == 3
        assert sleep.await_count == 2

    async def test_client_error_is_not_retried(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(400, json={"error": "bad request"})

        analysis = await _analyzer(handler).analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is None
        assert calls == 1

    async def test_transport_error_is_retried(self):
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise httpx.ConnectError("connection refused")
            return _gemini_response(VALID_PAYLOAD)

        analysis = await _analyzer(handler).analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is not None
        assert attempts == 2

    async def test_unparseable_text_fails_window(self):
        analysis = await _analyzer(
            lambda request: _gemini_response("I could not watch the video")
        ).analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is None

    @pytest.mark.parametrize("text", [42, None, {"places": []}])
    async def test_non_string_text_part_fails_window(self, text):
        analysis = await _analyzer(
            lambda request: httpx.Response(
                200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]}
            )
        ).analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is None

    async def test_response_without_candidates(self):
        analysis = await _analyzer(
            lambda request: httpx.Response(200, json={"promptFeedback": {}})
        ).analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is None

    async def test_empty_analysis_is_success(self):
        analysis = await _analyzer(
            lambda request: _gemini_response({"plan_title": "", "places": []})
        ).analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is not None
        assert analysis.places == []

    async def test_missing_api_key(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        analysis = await _analyzer(handler, api_key="").analyze_chunk(VIDEO_URL, WINDOW)

        assert analysis is None

    def test_model_name(self):
        assert _analyzer(lambda request: httpx.Response(200)).model_name == "gemini-2.5-flash"
