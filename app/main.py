# Run from project root: uvicorn app.main:app --reload

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.api.routes import router
from app.core.config import SEARCH_TIMEOUT
from app.services.responder import build_responder

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with httpx.AsyncClient(timeout=SEARCH_TIMEOUT) as client:
        app.state.http_client = client
        app.state.responder = build_responder(client)
        logger.info("[main:lifespan] responder ready")
        yield


app = FastAPI(title="Slash Command Responder", lifespan=lifespan)
app.include_router(router)
