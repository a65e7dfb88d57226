"""Outcome and off-ramp content models.

These mirror the ``tracks``, ``outcome`` and ``terminals`` sections of
``rules/screener.yaml``:

  - TrackDefinition:     a recommendation bundle plus the timeline codes
                         that select it
  - RecommendationTrack: the derived track shown on the outcome screen
  - OutcomeContent:      next steps and pro-tip shown below the tracks
  - OffRamp:             copy for a terminal (disqualification) screen
"""

from typing import List, Literal

from pydantic import BaseModel, Field, model_validator

from .screen import Screen


class RecommendationTrack(BaseModel):
    """A labeled action bundle derived from the answers.

    Never stored: the composer rebuilds it every time the outcome renders.
    """

    id: str
    title: str
    body: str
    tone: Literal["green", "yellow"]


class TrackDefinition(RecommendationTrack):
    """Ruleset entry for a track; ``timeline`` lists the codes selecting it."""

    timeline: List[str]

    def to_track(self) -> RecommendationTrack:
        return RecommendationTrack(id=self.id, title=self.title, body=self.body, tone=self.tone)


class ProTip(BaseModel):
    title: str
    body: str


class OutcomeContent(BaseModel):
    """Fixed material following the tracks on the outcome screen."""

    title: str
    subtitle: str
    next_steps: List[str] = Field(default_factory=list)
    pro_tip: ProTip | None = None


class OffRamp(BaseModel):
    """Copy for a terminal screen."""

    screen: Screen
    title: str
    body: str
    action: str | None = None

    @model_validator(mode="after")
    def _chk(self):
        if not self.screen.is_terminal:
            raise ValueError(f"off-ramp declared for non-terminal screen {self.screen.value!r}")
        return self
