"""ScreenGraph — the fixed transition table of the screener.

The graph is pure data derived from the ruleset:

  - answer edges:  (screen, question_key, code) -> next screen, one per option
  - manual edges:  (screen, target) for button-driven navigation
  - the auto edge: processing -> outcome, fired by the sequencer

``transition`` is a total lookup over the answer edges.  Anything not in the
table raises :class:`InvalidTransitionError`; the controller decides whether
that is fatal (strict mode) or a logged no-op.

Terminal screens have no answer edges.  Their only exit is a manual edge to
``entry``, which the controller implements as a full reset.
"""

from __future__ import annotations

import logging

from tariff_screener.errors import InvalidTransitionError
from tariff_screener.models.question import ManualEdge, Question
from tariff_screener.models.screen import Screen
from tariff_screener.ruleset import ScreenerRuleset

logger = logging.getLogger(__name__)

# The only edge not driven by the user.
AUTO_EDGE: tuple[Screen, Screen] = (Screen.PROCESSING, Screen.OUTCOME)


class ScreenGraph:
    """Directed graph of screens built from a loaded :class:`ScreenerRuleset`.

    Args:
        ruleset: the ruleset to build from; loaded on demand if needed
    """

    def __init__(self, ruleset: ScreenerRuleset) -> None:
        if not ruleset.loaded:
            ruleset.load()
        self._ruleset = ruleset

        self._answer_edges: dict[tuple[Screen, str, str], Screen] = {}
        self._questions_by_screen: dict[Screen, Question] = {}
        for q in ruleset.questions.values():
            self._questions_by_screen[q.screen] = q
            for opt in q.options:
                self._answer_edges[(q.screen, q.key, opt.code)] = opt.target

        self._manual: dict[Screen, list[ManualEdge]] = {}
        for edge in ruleset.manual_edges:
            self._manual.setdefault(edge.source, []).append(edge)

    @property
    def ruleset(self) -> ScreenerRuleset:
        return self._ruleset

    @property
    def questions(self) -> list[Question]:
        """Questions in the order they are asked."""
        return list(self._ruleset.questions.values())

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def transition(self, current: Screen | str, question_key: str, code: str) -> Screen:
        """Return the screen reached by answering ``question_key`` with ``code``.

        Raises:
            InvalidTransitionError: if the pair is not answerable from
                ``current`` (wrong screen, unknown question or unknown code).
        """
        screen = _coerce(current)
        if screen is None:
            raise InvalidTransitionError(str(current), question_key, code)
        target = self._answer_edges.get((screen, question_key, code))
        if target is None:
            raise InvalidTransitionError(screen.value, question_key, code)
        logger.debug("transition %s --%s=%s--> %s", screen.value, question_key, code, target.value)
        return target

    def can_answer(self, current: Screen | str, question_key: str, code: str) -> bool:
        screen = _coerce(current)
        return screen is not None and (screen, question_key, code) in self._answer_edges

    def manual_edges(self, current: Screen | str) -> list[ManualEdge]:
        """Manual navigation edges available from ``current`` (may be empty)."""
        screen = _coerce(current)
        if screen is None:
            return []
        return list(self._manual.get(screen, []))

    def manual_targets(self, current: Screen | str) -> list[Screen]:
        """Distinct manual targets from ``current``, in declaration order."""
        seen: list[Screen] = []
        for edge in self.manual_edges(current):
            if edge.target not in seen:
                seen.append(edge.target)
        return seen

    def is_manual_edge(self, current: Screen | str, target: Screen | str) -> bool:
        return _coerce(target) in self.manual_targets(current)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def question_for(self, screen: Screen | str) -> Question | None:
        """The question hosted on ``screen``, or None for non-question screens."""
        s = _coerce(screen)
        if s is None:
            return None
        return self._questions_by_screen.get(s)

    def edges(self) -> list[dict]:
        """Flat edge list ``[{source, target, label}]`` for inspection tools."""
        out: list[dict] = []
        for (screen, key, code), target in self._answer_edges.items():
            out.append({
                "source": screen.value,
                "target": target.value,
                "label": f"{key}={code}",
                "kind": "answer",
            })
        out.append({
            "source": AUTO_EDGE[0].value,
            "target": AUTO_EDGE[1].value,
            "label": "sequence complete",
            "kind": "auto",
        })
        for edges in self._manual.values():
            for edge in edges:
                out.append({
                    "source": edge.source.value,
                    "target": edge.target.value,
                    "label": edge.label,
                    "kind": "reset" if edge.target is Screen.ENTRY else "manual",
                })
        return out


def _coerce(value: Screen | str) -> Screen | None:
    """Accept a Screen or its string value; unknown strings map to None."""
    if isinstance(value, Screen):
        return value
    try:
        return Screen(value)
    except ValueError:
        return None
