"""RecommendationComposer — derives outcome tracks from the answers.

Tracks are selected by the ``timeline`` answer alone, using the timeline
codes each track lists in the ruleset.  Output follows ruleset order, so a
"mix of both" answer yields the fast-track before the protective-track.

Reaching the outcome without a timeline answer should not happen; when it
does the composer returns no tracks rather than raising.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from tariff_screener.constants import TIMELINE_KEY
from tariff_screener.models.content import RecommendationTrack, TrackDefinition

logger = logging.getLogger(__name__)


class RecommendationComposer:
    """Pure, deterministic track selection.

    Args:
        tracks: track definitions in display order
    """

    def __init__(self, tracks: Sequence[TrackDefinition]) -> None:
        self._tracks = list(tracks)

    @property
    def tracks(self) -> list[TrackDefinition]:
        return list(self._tracks)

    def compose(self, answers: Mapping[str, str]) -> list[RecommendationTrack]:
        timeline = answers.get(TIMELINE_KEY)
        if timeline is None:
            logger.debug("compose() without a timeline answer; no tracks")
            return []
        return [t.to_track() for t in self._tracks if timeline in t.timeline]
