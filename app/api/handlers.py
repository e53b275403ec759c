"""
API handlers: read the slash-command body, run the responder, map to a reply.

Responsibility: Bridge HTTP types and services. Parsing and sync/detached dispatch
live here so the responder stays free of FastAPI/HTTP types.
"""

import logging
from urllib.parse import parse_qsl

import httpx
from fastapi import BackgroundTasks, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from app.core.config import DETACHED_DEADLINE
from app.core.errors import SlashBodyError
from app.schemas.slash import Reply, SlashCommand, Visibility
from app.services.delivery import deliver_reply
from app.services.responder import Responder

logger = logging.getLogger(__name__)

ACK_TEXT = "Looking that up…"


def _field(data: dict, key: str) -> str | None:
    value = data.get(key)
    if not isinstance(value, str):
        return None
    return value.strip() or None


async def parse_slash_body(request: Request) -> SlashCommand:
    """
    Slack posts x-www-form-urlencoded; proxies and manual tests may send JSON.
    A raw body without a known content type is read as a query string.
    Raises SlashBodyError when a form body is malformed.
    """
    content_type = request.headers.get("content-type", "").lower()
    data: dict = {}
    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError:
            body = None
        data = body if isinstance(body, dict) else {}
    elif "application/x-www-form-urlencoded" in content_type or "multipart/form-data" in content_type:
        try:
            form = await request.form()
        except (StarletteHTTPException, MultiPartException, ValueError) as e:
            detail = getattr(e, "detail", None) or getattr(e, "message", None) or str(e)
            raise SlashBodyError(f"Could not read the command body: {detail}") from e
        data = {k: v for k, v in form.items() if isinstance(v, str)}
    else:
        raw = (await request.body()).decode("utf-8", errors="replace")
        data = dict(parse_qsl(raw, keep_blank_values=True))
    return SlashCommand(
        text=_field(data, "text") or "",
        response_url=_field(data, "response_url"),
        user_id=_field(data, "user_id"),
        command=_field(data, "command"),
    )


async def run_and_deliver(responder: Responder, command: SlashCommand, client: httpx.AsyncClient) -> None:
    """Background half of the detached variant: compute the reply, then POST it to response_url."""
    deadline = responder.new_deadline(DETACHED_DEADLINE)
    reply = await responder.respond(command.text, deadline)
    await deliver_reply(client, command.response_url, reply)


async def handle_ask(
    command: SlashCommand,
    responder: Responder,
    background_tasks: BackgroundTasks,
    client: httpx.AsyncClient | None,
    mode: str,
) -> Reply:
    """
    sync: run the responder now and return its reply as the HTTP body.
    detached: return an ack now; reply later via response_url.
    """
    logger.info(
        "[handlers:handle_ask] IN  mode=%s user_id=%s text=%r has_response_url=%s",
        mode,
        command.user_id,
        command.text,
        bool(command.response_url),
    )
    if mode != "detached" or not command.text or client is None:
        return await responder.respond(command.text)
    background_tasks.add_task(run_and_deliver, responder, command, client)
    return Reply(response_type=Visibility.PRIVATE, text=ACK_TEXT)
