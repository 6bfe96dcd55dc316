"""
FastAPI application factory and API package.

Run with:
    uvicorn pricing_desk.api:app --reload --port 8000

Or via main.py:
    python -m pricing_desk --serve
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricing_desk.config import get_settings
from pricing_desk.api.routes import desk_router, get_desk_service, health_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} API (mock_mode={settings.mock_mode})")
        yield
        service_factory = app.dependency_overrides.get(get_desk_service, get_desk_service)
        service_factory().shutdown()
        logger.info("Desk service shut down")

    application = FastAPI(
        title="Pricing Desk API",
        description="Rate negotiation and margin engine for the Mesa de Negociação",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS — allow the frontend (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(desk_router, prefix="/api/desk", tags=["Pricing Desk"])

    return application


# Module-level instance for `uvicorn pricing_desk.api:app`
app = create_app()
