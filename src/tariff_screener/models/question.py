"""Question and navigation models for the screener ruleset.

A question lives on the screen that shares its key.  Each option carries its
own transition target, so the whole branching logic is data:

  - Option:      one selectable choice (single-letter code) and where it leads
  - Question:    a decision point with an ordered, exhaustive set of options
  - ManualEdge:  a navigation edge not driven by an answer (buttons such as
                 "Let's Begin", "Back to Dashboard", "Return Home")

Validation happens at load time so a malformed ruleset fails on startup
rather than mid-session.
"""

from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .screen import Screen, ScreenKind

_CODE_RE = re.compile(r"^[A-Z]$")


class Option(BaseModel):
    """A selectable option; ``target`` is the screen it transitions to."""

    code: str
    label: str
    target: Screen
    # Shown on the question screen while this option is the stored answer
    hint: Optional[str] = None

    @field_validator("code")
    @classmethod
    def _single_letter(cls, v: str) -> str:
        if not _CODE_RE.match(v):
            raise ValueError(f"option code must be a single uppercase letter, got {v!r}")
        return v


class Question(BaseModel):
    """A single decision point with a closed set of options."""

    key: str
    title: str
    subtitle: Optional[str] = None
    # Expandable "What does this mean?" text
    help: Optional[str] = None
    # Bullet list shown above the options (document readiness check)
    checklist: List[str] = Field(default_factory=list)
    options: List[Option]

    @model_validator(mode="after")
    def _chk(self):
        if not self.options:
            raise ValueError(f"question {self.key!r} has no options")
        codes = [o.code for o in self.options]
        if len(set(codes)) != len(codes):
            raise ValueError(f"question {self.key!r} has duplicate option codes: {codes}")
        # The hosting screen must exist and be a question screen
        screen = Screen(self.key)
        if screen.kind is not ScreenKind.QUESTION:
            raise ValueError(f"question {self.key!r} is not hosted on a question screen")
        return self

    @property
    def screen(self) -> Screen:
        return Screen(self.key)

    @property
    def codes(self) -> list[str]:
        return [o.code for o in self.options]

    def option(self, code: str) -> Option | None:
        """Return the option with ``code``, or None if the code is unknown."""
        for opt in self.options:
            if opt.code == code:
                return opt
        return None


class ManualEdge(BaseModel):
    """Non-question navigation between two screens.

    A target of ``entry`` is always a full session reset.
    """

    source: Screen
    target: Screen
    label: str
