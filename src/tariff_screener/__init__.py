"""tariff_screener — IEEPA tariff rebate eligibility screener SDK.

Public API:
    ScreenerController     — owns a session; answer / advance / reset / submit_lead
    ScreenGraph            — fixed transition table built from the ruleset
    ScreenerRuleset        — loads rules/screener.yaml into typed models
    ProcessingSequencer    — cancellable timed status-message sequence
    RecommendationComposer — derives outcome tracks from the answers
    AnswerStore            — question key -> option code
    progress_for           — screen -> completion percentage
    ScreenRenderer         — Jinja2 plain-text rendering of a view

Lead capture:
    LeadSink               — ABC for lead delivery
    MemoryLeadSink         — in-memory sink
    FormLeadSink           — form-response endpoint sink (httpx)

Models:
    Screen, ScreenKind, ScreenerView, ScreenerSession, RecommendationTrack,
    LeadRecord, LeadSubmission
"""

from tariff_screener.answers import AnswerStore
from tariff_screener.controller import ScreenerController
from tariff_screener.errors import InvalidTransitionError, RulesetError
from tariff_screener.graph import ScreenGraph
from tariff_screener.interfaces import LeadSink
from tariff_screener.leads import FormLeadSink, MemoryLeadSink
from tariff_screener.models import (
    LeadRecord,
    LeadSubmission,
    RecommendationTrack,
    Screen,
    ScreenerSession,
    ScreenerView,
    ScreenKind,
)
from tariff_screener.progress import progress_for
from tariff_screener.recommendation import RecommendationComposer
from tariff_screener.render import ScreenRenderer
from tariff_screener.ruleset import ScreenerRuleset
from tariff_screener.sequencer import (
    AsyncioScheduler,
    CancelHandle,
    ProcessingSequencer,
    Scheduler,
)

__all__ = [
    # Controller & graph
    "ScreenerController",
    "ScreenGraph",
    "ScreenerRuleset",
    "AnswerStore",
    "progress_for",
    "RecommendationComposer",
    "ScreenRenderer",
    # Sequencer
    "ProcessingSequencer",
    "CancelHandle",
    "Scheduler",
    "AsyncioScheduler",
    # Leads
    "LeadSink",
    "MemoryLeadSink",
    "FormLeadSink",
    # Errors
    "InvalidTransitionError",
    "RulesetError",
    # Models
    "Screen",
    "ScreenKind",
    "ScreenerSession",
    "ScreenerView",
    "RecommendationTrack",
    "LeadRecord",
    "LeadSubmission",
]
