from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .db import Database
from .deps import build_services
from .errors import LeadboardError
from .log import setup_logging
from .routers import activities, cards, fields, keys, lists, tags, users

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.log_level)

    database = Database(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init_db()
        logger.info("database ready")
        yield
        database.engine.dispose()

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.services = build_services(database, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization", "X-API-Key"],
    )

    @app.exception_handler(LeadboardError)
    async def leadboard_error(request: Request, exc: LeadboardError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg', 'invalid request')}" if where else "invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "version": settings.app_version}

    app.include_router(users.router)
    app.include_router(users.oauth_router)
    app.include_router(lists.router)
    app.include_router(cards.router)
    app.include_router(cards.api_router)
    app.include_router(tags.router)
    app.include_router(keys.router)
    app.include_router(fields.router)
    app.include_router(activities.router)
    return app


app = create_app()
