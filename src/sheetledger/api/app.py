"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import Settings, settings
from .dependencies import build_services
from .routes import router


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Own the pooled HTTP client and the process-wide ledger services."""
        async with httpx.AsyncClient(timeout=config.request_timeout_seconds) as http_client:
            app.state.services = build_services(config, http_client=http_client)
            yield
            app.state.services = None

    app = FastAPI(
        title="SheetLedger",
        description="Append-and-sort ledger API on top of Google Sheets",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config

    # API routes
    app.include_router(router, prefix="/api")

    return app
