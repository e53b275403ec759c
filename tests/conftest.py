"""
Shared fakes for responder, clarifier and route tests.

No network: document backends and the chat model are in-memory stand-ins.
"""

import asyncio

import pytest

from app.core.catalog import DEFAULT_CATALOG
from app.services.document_backend import Document, SearchHit


class FakeDocuments:
    """DocumentSource that records calls and returns canned hits/documents."""

    def __init__(
        self,
        hits: list[dict] | None = None,
        documents: dict[str, Document | None] | None = None,
        search_error: Exception | None = None,
        search_delay: float = 0.0,
    ) -> None:
        self.hits = hits or []
        self.documents = documents or {}
        self.search_error = search_error
        self.search_delay = search_delay
        self.search_calls: list[tuple[str, int]] = []
        self.get_calls: list[str] = []

    async def search(self, query: str, limit: int = 3) -> tuple[SearchHit, ...]:
        self.search_calls.append((query, limit))
        if self.search_delay:
            await asyncio.sleep(self.search_delay)
        if self.search_error is not None:
            raise self.search_error
        return tuple(
            SearchHit(note_id=h["noteId"], rank=i, title=h.get("title"))
            for i, h in enumerate(self.hits[:limit])
        )

    async def get(self, note_id: str) -> Document | None:
        self.get_calls.append(note_id)
        return self.documents.get(note_id)


class FakeClarifier:
    """Clarifier stand-in: returns fixed text, records queries and budgets."""

    def __init__(self, text: str = "Which lead source?", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[str, float]] = []

    async def clarify(self, query: str, budget_s: float) -> str:
        self.calls.append((query, budget_s))
        if self.error is not None:
            raise self.error
        return self.text


class FakeModel:
    """ChatModel stand-in for Clarifier tests."""

    def __init__(
        self,
        text: str = "",
        error: Exception | None = None,
        delay: float = 0.0,
        configured: bool = True,
    ) -> None:
        self.text = text
        self.error = error
        self.delay = delay
        self._configured = configured
        self.calls: list[tuple[str, str]] = []

    @property
    def configured(self) -> bool:
        return self._configured

    async def complete(self, system: str, user: str) -> str:
        self.calls.append((system, user))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def catalog():
    return DEFAULT_CATALOG


@pytest.fixture
def fake_clarifier() -> FakeClarifier:
    return FakeClarifier()
