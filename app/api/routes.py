"""
API route aggregator: register endpoints and delegate to handlers.
"""

import logging

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import PlainTextResponse

from app.api.handlers import handle_ask, parse_slash_body
from app.core.config import ASK_DELIVERY_MODE, ENVIRONMENT_NAME, OPENAI_API_KEY, SLITE_API_KEY
from app.core.errors import SlashBodyError
from app.schemas.slash import EnvStatus, Reply, Visibility
from app.services.responder import Responder

logger = logging.getLogger(__name__)
router = APIRouter()


# --- Dependencies (overridden in tests) ---

def get_responder(request: Request) -> Responder:
    return request.app.state.responder


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    return getattr(request.app.state, "http_client", None)


def get_delivery_mode() -> str:
    return ASK_DELIVERY_MODE


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Slash command responder running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


@router.get(
    "/api/debug-env",
    response_model=EnvStatus,
    tags=["system"],
    summary="Report which secrets are configured",
    description="Presence only; secret values are never returned.",
)
def debug_env() -> EnvStatus:
    return EnvStatus(
        hasModelKey=bool(OPENAI_API_KEY),
        hasSearchKey=bool(SLITE_API_KEY),
        environmentName=ENVIRONMENT_NAME,
    )


# --- Slash command ---

@router.post(
    "/api/ask",
    response_model=Reply,
    tags=["slash"],
    summary="Slack /ask slash command",
    description="Form-encoded or JSON body with text (and optionally response_url, user_id). Always 200 with one reply.",
)
@router.post("/ask", response_model=Reply, include_in_schema=False)
async def post_ask(
    request: Request,
    background_tasks: BackgroundTasks,
    responder: Responder = Depends(get_responder),
    client: httpx.AsyncClient | None = Depends(get_http_client),
    mode: str = Depends(get_delivery_mode),
) -> Reply:
    try:
        command = await parse_slash_body(request)
    except SlashBodyError as e:
        logger.warning("[api:post_ask] unreadable body: %s", e.message)
        return Reply(response_type=Visibility.PRIVATE, text=f"❌ Error: {e.message}")
    return await handle_ask(command, responder, background_tasks, client, mode)


@router.api_route("/api/ask", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
@router.api_route("/ask", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def ask_wrong_method() -> PlainTextResponse:
    return PlainTextResponse("Use POST", status_code=405)
