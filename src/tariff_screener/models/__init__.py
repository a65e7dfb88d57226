"""Public model re-exports for tariff_screener.

Consumers should import from ``tariff_screener.models`` rather than
reaching into sub-modules directly.
"""

# --- Screens ---
from tariff_screener.models.screen import (
    SCREEN_KINDS,
    TERMINAL_SCREENS,
    Screen,
    ScreenKind,
)

# --- Questions / navigation ---
from tariff_screener.models.question import ManualEdge, Option, Question

# --- Outcome content ---
from tariff_screener.models.content import (
    OffRamp,
    OutcomeContent,
    ProTip,
    RecommendationTrack,
    TrackDefinition,
)

# --- Session / view ---
from tariff_screener.models.session import (
    LeadSubmission,
    NavigationAction,
    ScreenerSession,
    ScreenerView,
)

# --- Leads ---
from tariff_screener.models.lead import LeadRecord

__all__ = [
    # Screens
    "SCREEN_KINDS",
    "TERMINAL_SCREENS",
    "Screen",
    "ScreenKind",
    # Questions
    "ManualEdge",
    "Option",
    "Question",
    # Content
    "OffRamp",
    "OutcomeContent",
    "ProTip",
    "RecommendationTrack",
    "TrackDefinition",
    # Session
    "LeadSubmission",
    "NavigationAction",
    "ScreenerSession",
    "ScreenerView",
    # Leads
    "LeadRecord",
]
