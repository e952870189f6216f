"""HTTP boundary: maps requests onto TransactionsService and errors onto JSON."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..core.errors import NotConnected, RemoteError, SyncCancelled, SyncTimeout, TransportError
from ..service import TransactionsService

logger = logging.getLogger(__name__)

MAX_DAYS = 730


class SetAccessTokenRequest(BaseModel):
    public_token: Optional[str] = None


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"error_message": message, **extra}})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotConnected)
    async def _not_connected(request: Request, exc: NotConnected):
        return _error(400, exc.message)

    @app.exception_handler(RemoteError)
    async def _remote(request: Request, exc: RemoteError):
        logger.error("Plaid error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=400, content={"error": exc.to_payload()})

    @app.exception_handler(TransportError)
    async def _transport(request: Request, exc: TransportError):
        logger.error("Transport error on %s: %s", request.url.path, exc)
        return _error(502, str(exc))

    @app.exception_handler(SyncTimeout)
    async def _timeout(request: Request, exc: SyncTimeout):
        logger.error("Sync timed out on %s: %s", request.url.path, exc)
        return _error(504, str(exc))

    @app.exception_handler(SyncCancelled)
    async def _cancelled(request: Request, exc: SyncCancelled):
        return _error(503, str(exc))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return _error(500, str(exc) or "Internal server error")


def create_app(service: TransactionsService, default_days: int = 7) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        service.close()

    app = FastAPI(title="Plaid transactions sync", version=__version__, lifespan=lifespan)
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)

    def _days(days: Optional[int]) -> int:
        return default_days if days is None else days

    @app.get("/api/info")
    def info():
        return service.info()

    @app.post("/api/create_link_token")
    def create_link_token():
        return service.create_link_token()

    @app.post("/api/set_access_token")
    def set_access_token(body: SetAccessTokenRequest):
        if not body.public_token:
            return _error(400, "public_token is required")
        item_id = service.exchange_public_token(body.public_token)
        return {"access_token": "***", "item_id": item_id, "error": None}

    # handlers are sync so the not-ready wait blocks a worker thread, not the loop
    @app.get("/api/transactions_last_7_days")
    def transactions_sync(days: Optional[int] = Query(default=None, ge=0, le=MAX_DAYS)):
        return service.sync_recent(_days(days)).to_payload()

    @app.get("/api/transactions_get_last_7_days")
    def transactions_get(days: Optional[int] = Query(default=None, ge=0, le=MAX_DAYS)):
        return service.query_recent(_days(days)).to_payload()

    return app
