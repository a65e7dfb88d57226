"""AnswerStore — accumulated responses keyed by question key.

Re-answering a question overwrites its code; keys are never removed one at
a time.  The only way to clear the store is :meth:`clear`, used by session
reset.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping


class AnswerStore(Mapping[str, str]):
    """Append/overwrite-only mapping of question key -> option code."""

    def __init__(self) -> None:
        self._answers: dict[str, str] = {}

    def record(self, question_key: str, code: str) -> None:
        """Store ``code`` for ``question_key``, replacing any previous code."""
        self._answers[question_key] = code

    def clear(self) -> None:
        self._answers.clear()

    def snapshot(self) -> dict[str, str]:
        """A detached copy safe to hand to callers."""
        return dict(self._answers)

    def __getitem__(self, key: str) -> str:
        return self._answers[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    def __repr__(self) -> str:
        return f"AnswerStore({self._answers!r})"
