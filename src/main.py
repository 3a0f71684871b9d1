"""FastAPI application entry point: wires everything together.

Usage:
    python -m src.main

Serves the search, templates, audit and notifications APIs under /api,
plus an unauthenticated /health check.
"""
# ruff: noqa: B008

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import audit, notifications, search, templates
from src.api.errors import register_error_handlers
from src.config import settings
from src.db.engine import db_lifespan
from src.security.rate_limiter import enforce_rate_limit

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting %s API (env=%s)", settings.branding.app_name, settings.environment)

    async with db_lifespan():
        logger.info("Database initialized")
        try:
            yield
        finally:
            logger.info("Shutting down %s API...", settings.branding.app_name)

    logger.info("%s API shutdown complete", settings.branding.app_name)


# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title=f"{settings.branding.app_name} API",
    description=settings.branding.app_description,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

for module in (search, templates, audit, notifications):
    app.include_router(module.router, prefix="/api", dependencies=[Depends(enforce_rate_limit)])


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=settings.api.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
