"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the ruleset and builds the shared graph,
    renderer, lead sink and session registry once
  - CORS middleware
  - Global exception handlers (SDK ValueError → 404/409/400)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``screener-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tariff_screener.controller import ScreenerController
from tariff_screener.errors import InvalidTransitionError
from tariff_screener.graph import ScreenGraph
from tariff_screener.interfaces import LeadSink
from tariff_screener.leads import FormLeadSink, MemoryLeadSink
from tariff_screener.render import ScreenRenderer
from tariff_screener.ruleset import ScreenerRuleset
from tariff_screener.sequencer import AsyncioScheduler, ProcessingSequencer

from screener_server.config import ServerSettings, load_settings
from screener_server.errors import (
    generic_error_handler,
    invalid_transition_handler,
    key_error_handler,
    value_error_handler,
)
from screener_server.registry import SessionRegistry
from screener_server.routes import register_routes

logger = logging.getLogger(__name__)


def build_lead_sink(settings: ServerSettings) -> LeadSink:
    """Form sink when a form URL is configured, in-memory sink otherwise."""
    if settings.lead_form_url:
        logger.info("Lead sink: form endpoint")
        return FormLeadSink(settings.lead_form_url, settings.lead_form_fields)
    logger.info("Lead sink: in-memory (SCREENER_LEAD_FORM_URL not set)")
    return MemoryLeadSink()


# ------------------------------------------------------------------
# Lifespan: runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load the YAML ruleset and build the ``ScreenGraph``
      2. Build the renderer, lead sink and session registry
      3. Stash them on ``app.state`` for dependency injection

    Shutdown:
      1. Dispose every live session (cancels pending processing timers)
    """
    settings: ServerSettings = app.state.settings

    # --- Load ruleset ---
    ruleset = ScreenerRuleset(settings.ruleset_path)
    ruleset.load()
    graph = ScreenGraph(ruleset)
    logger.info("ScreenerRuleset loaded successfully")

    scheduler = AsyncioScheduler()

    def new_controller() -> ScreenerController:
        return ScreenerController(
            graph,
            sequencer=ProcessingSequencer(scheduler, interval_ms=settings.stage_interval_ms),
            strict=settings.strict_transitions,
        )

    app.state.ruleset = ruleset
    app.state.graph = graph
    app.state.renderer = ScreenRenderer(ruleset)
    if not hasattr(app.state, "lead_sink"):
        app.state.lead_sink = build_lead_sink(settings)
    app.state.registry = SessionRegistry(
        new_controller,
        ttl_seconds=settings.session_ttl_seconds,
        max_sessions=settings.max_sessions,
    )

    yield

    # --- Shutdown ---
    app.state.registry.clear()
    logger.info("Session registry cleared")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(
    settings: ServerSettings | None = None,
    *,
    lead_sink: LeadSink | None = None,
) -> FastAPI:
    """Build and return the configured FastAPI application.

    ``lead_sink`` overrides the sink derived from settings.
    """
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Tariff Screener API Server",
        description="REST API for the IEEPA tariff rebate eligibility screener",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler can read them
    app.state.settings = settings
    if lead_sink is not None:
        app.state.lead_sink = lead_sink

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(InvalidTransitionError, invalid_transition_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Liveness probe — reports the number of live sessions."""
        registry: SessionRegistry | None = getattr(app.state, "registry", None)
        return {"status": "ok", "sessions": len(registry) if registry is not None else 0}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn screener_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``screener-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "screener_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
