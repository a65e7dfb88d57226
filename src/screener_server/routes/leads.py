"""Lead-capture endpoint.

A successful submission resets the session to the entry screen.  A failed
one leaves it on lead capture with a user-facing error; the client may
resubmit by hand.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tariff_screener.interfaces import LeadSink
from tariff_screener.models.session import LeadSubmission

from screener_server.dependencies import get_lead_sink, get_registry
from screener_server.registry import SessionRegistry

router = APIRouter(tags=["leads"])


class LeadRequest(BaseModel):
    """Body for POST /sessions/{session_id}/lead."""
    email: str


@router.post("/sessions/{session_id}/lead")
async def submit_lead(
    session_id: str,
    body: LeadRequest,
    registry: SessionRegistry = Depends(get_registry),
    sink: LeadSink = Depends(get_lead_sink),
) -> LeadSubmission:
    """Submit the business email with the session's answers.

    Returns 409 when the session is not on the lead-capture screen.
    """
    controller = registry.require(session_id)
    return await controller.submit_lead(body.email, sink)
