"""ScreenerRuleset — loads ``rules/screener.yaml`` into typed models.

This is the single source of truth for screener data at runtime: questions
and their option targets, manual navigation edges, recommendation tracks,
outcome content, and off-ramp copy.  The ruleset is loaded once at startup
and cross-checked so an inconsistent file fails fast.

Usage::

    ruleset = ScreenerRuleset()     # defaults to the packaged rules/screener.yaml
    ruleset.load()

    q = ruleset.questions["timeline"]
    tracks = ruleset.tracks
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from tariff_screener.errors import RulesetError
from tariff_screener.models.content import OffRamp, OutcomeContent, TrackDefinition
from tariff_screener.models.question import ManualEdge, Question
from tariff_screener.models.screen import SCREEN_KINDS, TERMINAL_SCREENS, Screen, ScreenKind

logger = logging.getLogger(__name__)

DEFAULT_RULESET_PATH = Path(__file__).parent / "rules" / "screener.yaml"


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class ScreenerRuleset:
    """Loads the screener YAML and provides typed lookup.

    Attributes populated after :meth:`load`:

        questions     — dict[key, Question], in YAML order
        manual_edges  — list[ManualEdge]
        tracks        — list[TrackDefinition], in display order
        outcome       — OutcomeContent
        off_ramps     — dict[Screen, OffRamp]
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else DEFAULT_RULESET_PATH

        # Populated by load()
        self.questions: dict[str, Question] = {}
        self.manual_edges: list[ManualEdge] = []
        self.tracks: list[TrackDefinition] = []
        self.outcome: OutcomeContent | None = None
        self.off_ramps: dict[Screen, OffRamp] = {}
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> ScreenerRuleset:
        """Parse the ruleset into typed models and cross-check it.

        Raises ``FileNotFoundError`` if the file is missing, pydantic's
        ``ValidationError`` for malformed entries, and ``RulesetError`` for
        inconsistencies between sections.
        """
        raw = load_yaml(self._path) or {}

        self.questions = {}
        for q_dict in raw.get("questions", []):
            q = Question(**q_dict)
            if q.key in self.questions:
                raise RulesetError(f"duplicate question key: {q.key}")
            self.questions[q.key] = q

        self.manual_edges = [ManualEdge(**e) for e in raw.get("manual_edges", [])]
        self.tracks = [TrackDefinition(**t) for t in raw.get("tracks", [])]
        self.outcome = OutcomeContent(**raw["outcome"]) if raw.get("outcome") else None
        self.off_ramps = {}
        for r_dict in raw.get("terminals", []):
            ramp = OffRamp(**r_dict)
            self.off_ramps[ramp.screen] = ramp

        self._validate()
        self._loaded = True
        logger.info(
            "ScreenerRuleset loaded: %d questions, %d manual edges, %d tracks, %d off-ramps",
            len(self.questions),
            len(self.manual_edges),
            len(self.tracks),
            len(self.off_ramps),
        )
        return self

    # ------------------------------------------------------------------
    # Cross-section validation
    # ------------------------------------------------------------------

    def _validate(self) -> None:
        question_screens = {s for s, k in SCREEN_KINDS.items() if k is ScreenKind.QUESTION}
        hosted = {q.screen for q in self.questions.values()}
        missing = question_screens - hosted
        if missing:
            raise RulesetError(
                f"question screens without a question: {sorted(s.value for s in missing)}"
            )

        missing_ramps = TERMINAL_SCREENS - set(self.off_ramps)
        if missing_ramps:
            raise RulesetError(
                f"terminal screens without off-ramp copy: {sorted(s.value for s in missing_ramps)}"
            )

        # Question screens are left only by answering; the processing screen
        # only by its sequencer; terminals only by reset.
        for edge in self.manual_edges:
            kind = edge.source.kind
            if kind in (ScreenKind.QUESTION, ScreenKind.PROCESSING):
                raise RulesetError(f"manual edge from {kind.value} screen '{edge.source.value}'")
            if kind is ScreenKind.TERMINAL and edge.target is not Screen.ENTRY:
                raise RulesetError(
                    f"terminal screen '{edge.source.value}' may only exit to entry, "
                    f"got '{edge.target.value}'"
                )

        for ramp_screen in TERMINAL_SCREENS:
            if not any(e.source is ramp_screen for e in self.manual_edges):
                raise RulesetError(f"terminal screen '{ramp_screen.value}' has no reset edge")

        timeline = self.questions.get("timeline")
        if timeline is not None:
            valid_codes = set(timeline.codes)
            for track in self.tracks:
                unknown = set(track.timeline) - valid_codes
                if unknown:
                    raise RulesetError(
                        f"track '{track.id}' references unknown timeline codes: {sorted(unknown)}"
                    )

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get_question(self, key: str) -> Question:
        """Return the question for ``key``.  Raises KeyError if unknown."""
        if key not in self.questions:
            raise KeyError(f"Unknown question: {key}")
        return self.questions[key]

    def get_off_ramp(self, screen: Screen) -> OffRamp:
        """Return off-ramp copy for a terminal screen.  Raises KeyError if unknown."""
        if screen not in self.off_ramps:
            raise KeyError(f"No off-ramp for screen: {screen.value}")
        return self.off_ramps[screen]
