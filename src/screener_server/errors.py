"""Exception handlers installed by ``create_app``.

Routes call the registry and controllers directly and let their errors
propagate.  The registry raises ``ValueError`` for unknown or duplicate
session ids; the controller raises it for a lead submitted off the
lead-capture screen or while another submission is pending.  The handler
below turns those messages into 404/409 responses.  Strict-mode transition
errors and unknown reference keys get their own handlers.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from tariff_screener.errors import InvalidTransitionError

logger = logging.getLogger(__name__)

# Substring of the ValueError message -> HTTP status, first match wins.
# Anything unmatched is a 400.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("already exists", 409),        # SessionRegistry.create with a taken id
    ("not found", 404),             # SessionRegistry.require
    ("only valid during", 409),     # submit_lead off lead_capture
    ("already in progress", 409),   # submit_lead while the sink is pending
]

# Response bodies never echo session ids or screen names.
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Request conflicts with the current session state",
    400: "Invalid request",
}


def status_for_value_error(exc: ValueError) -> int:
    msg = str(exc).lower()
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg:
            return code
    return 400


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Session and lead-state ``ValueError`` -> 404, 409 or 400."""
    status = status_for_value_error(exc)
    logger.warning("ValueError [%d] at %s: %s", status, request.url, exc)
    return JSONResponse(
        status_code=status,
        content={"detail": _SAFE_MESSAGES.get(status, "Invalid request")},
    )


async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    """Strict mode only: an answer or navigation not in the screen graph."""
    logger.warning("InvalidTransition at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid transition", "screen": exc.screen},
    )


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown question key) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else: log the traceback, answer 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
