# -*- coding: utf-8 -*-
"""
NutraMeter API

Meal logging, progress tracking, AI photo analysis and nutrition insights.
"""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .analyze.api import router as analyze_router
from .auth.api import router as auth_router
from .config import settings
from .errors import NutraMeterError
from .insights.api import router as insights_router
from .meals.api import router as meals_router
from .persistence.gateway import PersistenceGateway
from .persistence.memory_store import MemoryStore
from .persistence.sqlite_store import SqliteStore
from .progress.api import router as progress_router
from .user.api import router as user_router

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    if first.get("type") == "missing" and field:
        return f"{field} is required"
    msg = str(first.get("msg") or "Invalid request")
    return f"{field}: {msg}" if field else msg


def create_app(gateway: PersistenceGateway | None = None) -> FastAPI:
    """Build the application; the default gateway is SQLite with an in-memory fallback."""
    if gateway is None:
        gateway = PersistenceGateway(
            SqliteStore(settings.db_path, timeout=settings.db_timeout),
            MemoryStore(),
        )

    app = FastAPI(
        title="NutraMeter",
        description="Meal logging, AI photo analysis and nutrition insights",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.gateway = gateway

    allow_all = settings.cors_origins == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        # Browsers reject credentials with a wildcard origin.
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NutraMeterError)
    async def _nutrameter_error(request: Request, exc: NutraMeterError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(meals_router)
    app.include_router(progress_router)
    app.include_router(analyze_router)
    app.include_router(insights_router)

    @app.get("/api/health", tags=["Health"])
    def health_check():
        return {"ok": True, "fallback_active": app.state.gateway.fallback_active}

    return app


app = create_app()


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    host = os.environ.get("NUTRAMETER_HOST") or os.environ.get("HOST") or "127.0.0.1"
    port_raw = os.environ.get("NUTRAMETER_PORT") or os.environ.get("PORT") or "8000"
    try:
        port = int(port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("nutrameter.api:app", host=host, port=port, reload=False)
