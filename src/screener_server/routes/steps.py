"""Step endpoints — answer questions, navigate, reset, render.

All handlers are ``async`` so they run on the event loop: the processing
sequencer schedules its timers there, and every mutation of a session
completes before the next request is handled.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from tariff_screener.models.session import ScreenerView
from tariff_screener.render import ScreenRenderer

from screener_server.dependencies import get_registry, get_renderer
from screener_server.registry import SessionRegistry

router = APIRouter(tags=["steps"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class AnswerRequest(BaseModel):
    """Body for POST /sessions/{session_id}/answer."""
    question: str
    code: str


class AdvanceRequest(BaseModel):
    """Body for POST /sessions/{session_id}/advance.

    ``target`` is a screen id; ``entry`` resets the session.
    """
    target: str


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions/{session_id}/answer")
async def answer(
    session_id: str,
    body: AnswerRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> ScreenerView:
    """Answer the current question and advance.

    Invalid pairs leave the session unchanged (or return 400 when the
    server runs with strict transitions).
    """
    controller = registry.require(session_id)
    return controller.answer(body.question, body.code)


@router.post("/sessions/{session_id}/advance")
async def advance(
    session_id: str,
    body: AdvanceRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> ScreenerView:
    """Follow a manual navigation edge from the current screen."""
    controller = registry.require(session_id)
    return controller.advance_manually(body.target)


@router.post("/sessions/{session_id}/reset")
async def reset(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> ScreenerView:
    """Start over: back to the entry screen with no answers."""
    controller = registry.require(session_id)
    return controller.reset()


@router.get("/sessions/{session_id}/render", response_class=PlainTextResponse)
async def render(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
    renderer: ScreenRenderer = Depends(get_renderer),
) -> str:
    """Plain-text rendering of the current screen."""
    controller = registry.require(session_id)
    return renderer.render_view(controller.view())
