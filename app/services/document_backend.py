"""
Document backend (Slite): note search and note fetch.

Two API variants implement the same DocumentBackend protocol. FallbackDocumentClient
probes them in order and moves on only when a variant reports its endpoint is not
implemented; every other failure is logged and reported as "no result".
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

import httpx

from app.core.errors import BackendError, BackendNotImplementedError
from app.services.text_processing import extract_text

logger = logging.getLogger(__name__)

# Statuses meaning "this endpoint does not exist here", not "this request failed"
NOT_IMPLEMENTED_STATUSES = frozenset({404, 405, 410, 501})


@dataclass(frozen=True)
class SearchHit:
    """One candidate note; rank is the position the backend returned it at."""

    note_id: str
    rank: int
    title: str | None = None


@dataclass(frozen=True)
class Document:
    note_id: str
    title: str | None
    body: str


class DocumentBackend(Protocol):
    name: str

    async def search(self, query: str, limit: int) -> tuple[SearchHit, ...]: ...

    async def get(self, note_id: str) -> Document | None: ...


def _note_id(item: Any) -> str | None:
    if not isinstance(item, dict):
        return None
    raw = item.get("noteId") or item.get("id")
    if raw is None:
        return None
    return str(raw).strip() or None


def _title(item: dict) -> str | None:
    title = item.get("title")
    if isinstance(title, str) and title.strip():
        return title.strip()
    return None


def _parse_hits(items: Any, limit: int) -> tuple[SearchHit, ...]:
    if not isinstance(items, list):
        raise BackendError("search payload has no hit list")
    hits: list[SearchHit] = []
    for item in items:
        note_id = _note_id(item)
        if note_id is None:
            continue
        hits.append(SearchHit(note_id=note_id, rank=len(hits), title=_title(item)))
        if len(hits) >= limit:
            break
    return tuple(hits)


def _parse_note(note_id: str, data: Any) -> Document:
    if not isinstance(data, dict):
        raise BackendError("note payload is not an object")
    note = data.get("note") if isinstance(data.get("note"), dict) else data
    body = extract_text(note.get("content"))
    if not body:
        body = extract_text({k: note.get(k) for k in ("markdown", "text")})
    return Document(note_id=_note_id(note) or note_id, title=_title(note), body=body)


class _SliteApi:
    """Shared HTTP plumbing for the Slite API variants."""

    name = "slite"

    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str) -> None:
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise BackendError(f"{self.name} request failed: {e}") from e
        if response.status_code in NOT_IMPLEMENTED_STATUSES:
            raise BackendNotImplementedError(
                f"{self.name} {path} returned {response.status_code}", response.status_code
            )
        if response.status_code < 200 or response.status_code >= 300:
            raise BackendError(
                f"{self.name} {path} returned {response.status_code}: {response.text[:200]}",
                response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"{self.name} {path} returned malformed JSON") from e


class SliteCurrentApi(_SliteApi):
    """GET /v1/search-notes and GET /v1/notes/{id}."""

    name = "slite-current"

    async def search(self, query: str, limit: int) -> tuple[SearchHit, ...]:
        data = await self._get_json("/v1/search-notes", {"query": query, "hitsPerPage": str(limit)})
        if not isinstance(data, dict):
            raise BackendError("search payload is not an object")
        return _parse_hits(data.get("hits", []), limit)

    async def get(self, note_id: str) -> Document | None:
        data = await self._get_json(f"/v1/notes/{note_id}")
        return _parse_note(note_id, data)


class SliteLegacyApi(_SliteApi):
    """Older deployments: GET /v1/notes/search and GET /v1/notes/{id}/content."""

    name = "slite-legacy"

    async def search(self, query: str, limit: int) -> tuple[SearchHit, ...]:
        data = await self._get_json("/v1/notes/search", {"q": query, "limit": str(limit)})
        if isinstance(data, list):
            return _parse_hits(data, limit)
        if not isinstance(data, dict):
            raise BackendError("search payload is not an object")
        items = data.get("notes") if "notes" in data else data.get("hits", [])
        return _parse_hits(items, limit)

    async def get(self, note_id: str) -> Document | None:
        data = await self._get_json(f"/v1/notes/{note_id}/content")
        return _parse_note(note_id, data)


class FallbackDocumentClient:
    """
    Search Client and Document Fetcher over an ordered list of API variants.

    search() never raises for backend trouble: it returns () on any failure.
    get() returns None on any failure or when no variant has the note.
    """

    def __init__(self, variants: Sequence[DocumentBackend]) -> None:
        if not variants:
            raise ValueError("at least one document backend variant is required")
        self._variants = tuple(variants)

    async def search(self, query: str, limit: int = 3) -> tuple[SearchHit, ...]:
        logger.info("[document_backend:search] IN  query=%r limit=%d", query, limit)
        for variant in self._variants:
            try:
                hits = await variant.search(query, limit)
            except BackendNotImplementedError as e:
                logger.info("[document_backend:search] %s not implemented (%s); trying next", variant.name, e.status_code)
                continue
            except BackendError as e:
                logger.warning("[document_backend:search] %s failed: %s", variant.name, e.message)
                return ()
            hits = tuple(hits[:limit])
            logger.info(
                "[document_backend:search] OUT variant=%s hits=%d ids=%s",
                variant.name,
                len(hits),
                [h.note_id for h in hits],
            )
            return hits
        logger.warning("[document_backend:search] no variant supports search")
        return ()

    async def get(self, note_id: str) -> Document | None:
        logger.info("[document_backend:get] IN  note_id=%s", note_id)
        for variant in self._variants:
            try:
                doc = await variant.get(note_id)
            except BackendNotImplementedError as e:
                logger.info("[document_backend:get] %s not implemented (%s); trying next", variant.name, e.status_code)
                continue
            except BackendError as e:
                logger.warning("[document_backend:get] %s failed: %s", variant.name, e.message)
                return None
            logger.info(
                "[document_backend:get] OUT variant=%s found=%s body_len=%d",
                variant.name,
                doc is not None,
                len(doc.body) if doc else 0,
            )
            return doc
        logger.info("[document_backend:get] OUT note_id=%s not found", note_id)
        return None


def build_slite_client(client: httpx.AsyncClient, api_key: str, base_url: str) -> FallbackDocumentClient:
    """Current API first, legacy API when the current endpoints are missing."""
    return FallbackDocumentClient(
        [
            SliteCurrentApi(client, api_key, base_url),
            SliteLegacyApi(client, api_key, base_url),
        ]
    )
