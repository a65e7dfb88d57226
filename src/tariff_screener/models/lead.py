"""Lead record handed to a ``LeadSink``.

The record carries the business email plus whatever answers the session
collected.  Unanswered questions stay ``None``; sinks decide how to encode
them.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator


class LeadRecord(BaseModel):
    """Captured lead: email and the four screener answers."""

    email: EmailStr
    qualification: Optional[str] = None
    supply_chain: Optional[str] = None
    documents: Optional[str] = None
    timeline: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def from_answers(cls, email: str, answers: dict[str, str]) -> "LeadRecord":
        """Build a record from an AnswerSet, ignoring unknown keys."""
        return cls(
            email=email,
            qualification=answers.get("qualification"),
            supply_chain=answers.get("supply_chain"),
            documents=answers.get("documents"),
            timeline=answers.get("timeline"),
        )
