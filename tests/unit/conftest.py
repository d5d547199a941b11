"""Shared fakes for pipeline tests."""

import copy
import time
from typing import Any
from uuid import uuid4

import pytest

from itinerary_pipeline.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DocumentDBError,
    HealthStatus,
)
from itinerary_pipeline.domain.models import ChunkWindow, ExtractedPlace
from itinerary_pipeline.infrastructure.video_ai.base import (
    ChunkAnalysis,
    VideoAnalyzerBase,
)


class InMemoryDocumentDB(DocumentDBBase):
    """Dict-backed document store with the same write semantics as MongoDB.

    Documents are deep-copied on the way in and out, so callers never share
    state with the store.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.indexes: dict[str, list[str]] = {}
        self.fail_insert_many = False

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self.collections.setdefault(name, {})

    @staticmethod
    def _matches(document: dict[str, Any], filters: dict[str, Any]) -> bool:
        return all(document.get(k) == v for k, v in filters.items())

    def all(self, collection: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(d) for d in self._collection(collection).values()]

    async def insert_many(
        self,
        collection: str,
        documents: list[dict[str, Any]],
    ) -> list[str]:
        if self.fail_insert_many:
            raise DocumentDBError(f"Bulk insert into {collection} failed")
        store = self._collection(collection)
        ids = []
        for document in documents:
            doc = copy.deepcopy(document)
            doc.setdefault("id", str(uuid4()))
            if doc["id"] in store:
                raise DocumentDBError(f"Duplicate id {doc['id']}")
            ids.append(doc["id"])
        for document, id_ in zip(documents, ids, strict=True):
            store[id_] = {**copy.deepcopy(document), "id": id_}
        return ids

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        doc = self._collection(collection).get(document_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        docs = [
            copy.deepcopy(d)
            for d in self._collection(collection).values()
            if self._matches(d, filters)
        ]
        for field_name, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(field_name), reverse=direction < 0)
        return docs[skip : skip + limit]

    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        doc = self._collection(collection).get(document_id)
        if doc is None:
            return False
        doc.update(copy.deepcopy(updates))
        return True

    async def update_where(
        self,
        collection: str,
        document_id: str,
        expected: dict[str, list[Any]],
        updates: dict[str, Any],
    ) -> bool:
        doc = self._collection(collection).get(document_id)
        if doc is None:
            return False
        if any(doc.get(k) not in allowed for k, allowed in expected.items()):
            return False
        doc.update(copy.deepcopy(updates))
        return True

    async def update_many(
        self,
        collection: str,
        filters: dict[str, Any],
        updates: dict[str, Any],
    ) -> int:
        matched = 0
        for doc in self._collection(collection).values():
            if self._matches(doc, filters):
                doc.update(copy.deepcopy(updates))
                matched += 1
        return matched

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        return sum(
            1
            for d in self._collection(collection).values()
            if self._matches(d, filters or {})
        )

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        index_name = name or "_".join(f"{f}_{d}" for f, d in fields)
        self.indexes.setdefault(collection, []).append(index_name)
        return index_name

    async def health_check(self) -> HealthStatus:
        return HealthStatus(healthy=True, latency_ms=0.0, message="in memory")


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedAnalyzer(VideoAnalyzerBase):
    """Returns a fixed analysis per chunk index and records every call.

    Each call advances ``clock`` by ``seconds_per_call`` when a clock is set.
    """

    def __init__(
        self,
        responses: dict[int, ChunkAnalysis | None],
        clock: FakeClock | None = None,
        seconds_per_call: float = 0.0,
    ) -> None:
        self.responses = responses
        self.clock = clock
        self.seconds_per_call = seconds_per_call
        self.calls: list[ChunkWindow] = []

    @property
    def model_name(self) -> str:
        return "scripted"

    async def analyze_chunk(
        self,
        source_url: str,
        window: ChunkWindow,
    ) -> ChunkAnalysis | None:
        self.calls.append(window)
        if self.clock is not None:
            self.clock.advance(self.seconds_per_call)
        return self.responses.get(window.index)

    @property
    def called_indexes(self) -> list[int]:
        return [w.index for w in self.calls]


def place(name: str, start: float | None = None, **fields: Any) -> ExtractedPlace:
    """Build a gateway-style place with a chunk-relative start."""
    return ExtractedPlace(place_name=name, timeline_start_sec=start, **fields)


@pytest.fixture
def document_db() -> InMemoryDocumentDB:
    return InMemoryDocumentDB()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(start=time.monotonic())
