"""Screen identifiers for the screener state machine.

Screens are stateless labels drawn from a fixed, closed set.  Each screen
belongs to exactly one ``ScreenKind`` so that rendering and controller logic
can dispatch on the kind instead of enumerating screens:

  - entry:        landing screen ("Let's Begin")
  - question:     one screen per question key
  - processing:   the timed "computing results" interstitial
  - outcome:      the recovery dashboard with recommendation tracks
  - lead_capture: email capture form
  - terminal:     disqualifying off-ramps, exitable only by full reset
"""

import enum


class Screen(str, enum.Enum):
    """Every screen the screener can show.

    Question screens share their value with the question key they host
    (e.g. ``Screen.TIMELINE`` hosts the ``timeline`` question).
    """

    ENTRY = "entry"
    QUALIFICATION = "qualification"
    SUPPLY_CHAIN = "supply_chain"
    DOCUMENTS = "documents"
    TIMELINE = "timeline"
    PROCESSING = "processing"
    OUTCOME = "outcome"
    LEAD_CAPTURE = "lead_capture"
    FALLBACK_QUALIFICATION = "fallback_qualification"
    FALLBACK_SUPPLIER = "fallback_supplier"
    FALLBACK_DOMESTIC = "fallback_domestic"

    @property
    def kind(self) -> "ScreenKind":
        return SCREEN_KINDS[self]

    @property
    def is_terminal(self) -> bool:
        return self.kind is ScreenKind.TERMINAL


class ScreenKind(str, enum.Enum):
    """Coarse screen category used for rendering and navigation rules."""

    ENTRY = "entry"
    QUESTION = "question"
    PROCESSING = "processing"
    OUTCOME = "outcome"
    LEAD_CAPTURE = "lead_capture"
    TERMINAL = "terminal"


SCREEN_KINDS: dict[Screen, ScreenKind] = {
    Screen.ENTRY: ScreenKind.ENTRY,
    Screen.QUALIFICATION: ScreenKind.QUESTION,
    Screen.SUPPLY_CHAIN: ScreenKind.QUESTION,
    Screen.DOCUMENTS: ScreenKind.QUESTION,
    Screen.TIMELINE: ScreenKind.QUESTION,
    Screen.PROCESSING: ScreenKind.PROCESSING,
    Screen.OUTCOME: ScreenKind.OUTCOME,
    Screen.LEAD_CAPTURE: ScreenKind.LEAD_CAPTURE,
    Screen.FALLBACK_QUALIFICATION: ScreenKind.TERMINAL,
    Screen.FALLBACK_SUPPLIER: ScreenKind.TERMINAL,
    Screen.FALLBACK_DOMESTIC: ScreenKind.TERMINAL,
}

TERMINAL_SCREENS: frozenset[Screen] = frozenset(
    s for s, k in SCREEN_KINDS.items() if k is ScreenKind.TERMINAL
)
