"""Session management endpoints — create, get, delete sessions.

Sessions live in process memory only.  A session id may be supplied by the
caller (e.g. a browser tab id) or generated by the server.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tariff_screener.models.session import ScreenerView

from screener_server.dependencies import get_registry
from screener_server.registry import SessionRegistry

router = APIRouter(tags=["sessions"])


# ------------------------------------------------------------------
# Request / response models
# ------------------------------------------------------------------

class CreateSessionRequest(BaseModel):
    """Body for POST /sessions."""
    session_id: str | None = None


class SessionResponse(BaseModel):
    session_id: str
    view: ScreenerView


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions", status_code=201)
async def create_session(
    body: CreateSessionRequest | None = None,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    """Create a new screener session on the entry screen.

    Returns 201 on success.  Raises 409 if ``session_id`` is already live.
    """
    sid, controller = registry.create(body.session_id if body else None)
    return SessionResponse(session_id=sid, view=controller.view())


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    """Return the current view of a session.  404 if unknown or expired."""
    controller = registry.require(session_id)
    return SessionResponse(session_id=session_id, view=controller.view())


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    """Discard a session, cancelling any processing in flight."""
    registry.delete(session_id)
