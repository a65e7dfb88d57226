"""Screener exceptions.

Both subclass ``ValueError`` so callers that only care about "bad input"
(such as the REST server's global handler) can treat them uniformly.
"""


class InvalidTransitionError(ValueError):
    """A question/code pair or manual target missing from the screen graph."""

    def __init__(self, screen: str, question: str | None, code: str | None) -> None:
        self.screen = screen
        self.question = question
        self.code = code
        if question is None:
            detail = f"no manual edge from '{screen}' to '{code}'"
        else:
            detail = f"'{question}'='{code}' is not answerable from '{screen}'"
        super().__init__(f"Invalid transition: {detail}")


class RulesetError(ValueError):
    """The ruleset YAML is structurally inconsistent."""
