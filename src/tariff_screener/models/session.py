"""Session and view models — the contract between the controller and callers.

``ScreenerSession`` is the mutable aggregate owned by the controller.  It is
memory-only and disposable; nothing here is persisted.

``ScreenerView`` is the read-only view-model handed to the presentation
layer after every change.  It is intentionally flat so a UI (or the REST
API) can render it without knowing about the ruleset internals.
"""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel

from tariff_screener.answers import AnswerStore

from .content import RecommendationTrack
from .question import Question
from .screen import Screen, ScreenKind


@dataclass
class ScreenerSession:
    """Aggregate root: current screen, answers, and derived progress.

    ``status_message`` and ``error`` are view state for the processing and
    lead-capture screens; both are cleared on reset.  ``lead_pending`` is set
    while a lead submission for this session awaits its sink.
    """

    screen: Screen = Screen.ENTRY
    answers: AnswerStore = field(default_factory=AnswerStore)
    progress: int = 0
    status_message: str | None = None
    error: str | None = None
    lead_pending: bool = False


class NavigationAction(BaseModel):
    """A manual navigation target available from the current screen."""

    target: Screen
    label: str


class ScreenerView(BaseModel):
    """Read-only snapshot of the session for the presentation layer."""

    screen: Screen
    kind: ScreenKind
    progress: int
    answers: dict[str, str]
    recommendation_tracks: list[RecommendationTrack] = []
    # Current question (question screens only)
    question: Optional[Question] = None
    # Hint attached to the stored answer of the current question, if any
    hint: Optional[str] = None
    # Latest sequencer message (processing screen only)
    status_message: Optional[str] = None
    # User-facing error (lead-capture failures)
    error: Optional[str] = None
    actions: list[NavigationAction] = []


class LeadSubmission(BaseModel):
    """Outcome of a lead-capture submission."""

    ok: bool
    error: Optional[str] = None
    view: ScreenerView
