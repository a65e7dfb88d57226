"""FastAPI dependency injection — provides the registry, ruleset, graph, renderer and lead sink.

Shared objects are built once in the lifespan handler and stashed on
``app.state``; these helpers pull them back out per request.
"""

from fastapi import Request

from tariff_screener.graph import ScreenGraph
from tariff_screener.interfaces import LeadSink
from tariff_screener.render import ScreenRenderer

from screener_server.registry import SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    """Return the session registry singleton from ``app.state``."""
    return request.app.state.registry


def get_graph(request: Request) -> ScreenGraph:
    """Return the ScreenGraph singleton from ``app.state``."""
    return request.app.state.graph


def get_renderer(request: Request) -> ScreenRenderer:
    """Return the ScreenRenderer singleton from ``app.state``."""
    return request.app.state.renderer


def get_lead_sink(request: Request) -> LeadSink:
    """Return the configured LeadSink from ``app.state``."""
    return request.app.state.lead_sink
