"""
Responder: turn one slash-command query into exactly one Reply.

Flow: validate → classify → search (bounded) → answer from the top hit, or
clarify when the query is generic or nothing was found. Every backend call gets
a sub-budget of the request deadline; every failure degrades to a safe reply.
No LLM on the answer path, so answers only ever quote retrieved documents.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import httpx

from app.agent.clarifier import Clarifier
from app.agent.llm import OpenAIChat
from app.core.catalog import ClarifyCatalog, load_catalog
from app.core.config import (
    CLARIFIER_TIMEOUT,
    CLARIFY_CATALOG_PATH,
    DEADLINE_HEADROOM,
    DOCUMENT_TIMEOUT,
    EXCERPT_MAX_CHARS,
    PLATFORM_DEADLINE,
    SEARCH_HIT_LIMIT,
    SEARCH_TIMEOUT,
    SLITE_API_KEY,
    SLITE_BASE_URL,
)
from app.core.deadline import RequestDeadline, call_with_budget
from app.schemas.slash import Reply, Visibility
from app.services.document_backend import Document, SearchHit, build_slite_client
from app.services.text_processing import make_excerpt

logger = logging.getLogger(__name__)

USAGE_TEXT = "Usage: /ask your question"
DEFAULT_TITLE = "Document"


class QueryClass(str, Enum):
    GENERIC = "generic"
    SPECIFIC = "specific"


class DocumentSource(Protocol):
    async def search(self, query: str, limit: int = 3) -> tuple[SearchHit, ...]: ...

    async def get(self, note_id: str) -> Document | None: ...


@dataclass(frozen=True)
class ResponderTimeouts:
    """Seconds. Each call budget is capped by what is left of total minus headroom."""

    total: float = PLATFORM_DEADLINE
    headroom: float = DEADLINE_HEADROOM
    search: float = SEARCH_TIMEOUT
    document: float = DOCUMENT_TIMEOUT
    clarifier: float = CLARIFIER_TIMEOUT


def format_answer(title: str, excerpt: str, hint: str) -> str:
    """Slack text for a top-match answer; the quote line is left out when there is no excerpt."""
    quote = f"> {excerpt}…" if excerpt else ""
    return f"*Top match:* {title}\n{quote}\n\n{hint}"


class Responder:
    def __init__(
        self,
        documents: DocumentSource,
        clarifier: Clarifier,
        catalog: ClarifyCatalog,
        timeouts: ResponderTimeouts | None = None,
        hit_limit: int = SEARCH_HIT_LIMIT,
        excerpt_chars: int = EXCERPT_MAX_CHARS,
    ) -> None:
        self._documents = documents
        self._clarifier = clarifier
        self._catalog = catalog
        self._timeouts = timeouts or ResponderTimeouts()
        self._hit_limit = hit_limit
        self._excerpt_chars = excerpt_chars

    @property
    def timeouts(self) -> ResponderTimeouts:
        return self._timeouts

    def classify(self, query: str) -> QueryClass:
        return QueryClass.GENERIC if self._catalog.is_generic(query) else QueryClass.SPECIFIC

    def new_deadline(self, total_s: float | None = None) -> RequestDeadline:
        return RequestDeadline(total_s if total_s is not None else self._timeouts.total, self._timeouts.headroom)

    async def respond(self, text: str | None, deadline: RequestDeadline | None = None) -> Reply:
        """Always returns a Reply; unexpected failures become an error reply."""
        deadline = deadline or self.new_deadline()
        try:
            reply = await self._respond((text or "").strip(), deadline)
        except Exception as e:
            logger.exception("[responder:respond] unexpected failure")
            reply = Reply(response_type=Visibility.PRIVATE, text=f"❌ Error: {str(e) or type(e).__name__}")
        logger.info("[responder:respond] OUT elapsed_ms=%.0f text_len=%d", deadline.elapsed() * 1000, len(reply.text))
        return reply

    async def _respond(self, query: str, deadline: RequestDeadline) -> Reply:
        if not query:
            logger.info("[responder:respond] IN  empty query; usage")
            return Reply(response_type=Visibility.PRIVATE, text=USAGE_TEXT)

        query_class = self.classify(query)
        logger.info("[responder:respond] IN  query=%r class=%s", query, query_class.value)
        if query_class is QueryClass.GENERIC:
            return await self._clarify(query, deadline)

        outcome = await call_with_budget(
            self._documents.search(query, self._hit_limit),
            deadline.budget_for(self._timeouts.search),
            label="search",
        )
        hits = tuple(outcome.value or ()) if outcome.ok else ()
        if not hits:
            return await self._clarify(query, deadline)
        return await self._answer(hits[0], deadline)

    async def _clarify(self, query: str, deadline: RequestDeadline) -> Reply:
        text = await self._clarifier.clarify(query, deadline.budget_for(self._timeouts.clarifier))
        return Reply(response_type=Visibility.PRIVATE, text=text)

    async def _answer(self, hit: SearchHit, deadline: RequestDeadline) -> Reply:
        outcome = await call_with_budget(
            self._documents.get(hit.note_id),
            deadline.budget_for(self._timeouts.document),
            label="document",
        )
        doc = outcome.value if outcome.ok else None
        title = (doc.title if doc else None) or hit.title or DEFAULT_TITLE
        excerpt = make_excerpt(doc.body if doc else "", self._excerpt_chars)
        logger.info("[responder:answer] note_id=%s title=%r excerpt_len=%d", hit.note_id, title, len(excerpt))
        return Reply(
            response_type=Visibility.PRIVATE,
            text=format_answer(title, excerpt, self._catalog.answer_hint()),
        )


def build_responder(http_client: httpx.AsyncClient) -> Responder:
    """Production wiring: Slite (current → legacy API), OpenAI clarifier, configured catalog."""
    catalog = load_catalog(CLARIFY_CATALOG_PATH)
    documents = build_slite_client(http_client, SLITE_API_KEY, SLITE_BASE_URL)
    clarifier = Clarifier(OpenAIChat(), catalog)
    return Responder(documents, clarifier, catalog)
