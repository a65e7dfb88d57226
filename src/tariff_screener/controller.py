"""ScreenerController — owns one screener session and drives it.

The controller is the only thing that mutates a :class:`ScreenerSession`.
Each user intent maps to one method:

    answer(question_key, code)   question screens
    advance_manually(target)     buttons: begin, dashboard actions, back, home
    reset()                      start over (also after a successful lead)
    submit_lead(email, sink)     lead-capture form

Entering the processing screen starts exactly one
:class:`ProcessingSequencer` run; leaving it for any other screen (including
via reset) cancels that run, so a stale completion can never move a later
session.  The completion callback additionally checks that the session is
still on the processing screen before advancing to the outcome.

Invalid transitions raise :class:`InvalidTransitionError` when ``strict``
is set.  Otherwise they are logged and ignored: the session stays where it
was and the answer is not recorded.
"""

from __future__ import annotations

import logging
from typing import Callable

from pydantic import ValidationError

from tariff_screener.errors import InvalidTransitionError
from tariff_screener.graph import ScreenGraph
from tariff_screener.interfaces import LeadSink
from tariff_screener.models.lead import LeadRecord
from tariff_screener.models.screen import Screen
from tariff_screener.models.session import (
    LeadSubmission,
    NavigationAction,
    ScreenerSession,
    ScreenerView,
)
from tariff_screener.progress import progress_for
from tariff_screener.recommendation import RecommendationComposer
from tariff_screener.sequencer import AsyncioScheduler, CancelHandle, ProcessingSequencer, Scheduler

logger = logging.getLogger(__name__)

ViewListener = Callable[[ScreenerView], None]

INVALID_EMAIL_MESSAGE = "Please enter a valid business email address."
LEAD_FAILURE_MESSAGE = "There was an error submitting your information. Please try again."


class ScreenerController:
    """Orchestrates graph, answers, progress, sequencer and composer.

    Args:
        graph: the screen graph
        scheduler: timer scheduler for the default sequencer; defaults to
            the running asyncio loop
        sequencer: a preconfigured sequencer (overrides ``scheduler``)
        composer: recommendation composer; defaults to the ruleset tracks
        strict: raise on invalid transitions instead of ignoring them
    """

    def __init__(
        self,
        graph: ScreenGraph,
        *,
        scheduler: Scheduler | None = None,
        sequencer: ProcessingSequencer | None = None,
        composer: RecommendationComposer | None = None,
        strict: bool = False,
    ) -> None:
        self._graph = graph
        self._sequencer = sequencer or ProcessingSequencer(scheduler or AsyncioScheduler())
        self._composer = composer or RecommendationComposer(graph.ruleset.tracks)
        self._strict = strict
        self._session = ScreenerSession()
        self._handle: CancelHandle | None = None
        self._listeners: list[ViewListener] = []

    # ==================================================================
    # State access
    # ==================================================================

    @property
    def session(self) -> ScreenerSession:
        return self._session

    @property
    def screen(self) -> Screen:
        return self._session.screen

    @property
    def progress(self) -> int:
        return self._session.progress

    @property
    def answers(self) -> dict[str, str]:
        return self._session.answers.snapshot()

    @property
    def processing_handle(self) -> CancelHandle | None:
        """Handle of the current sequencer run, if one is active."""
        if self._handle is not None and self._handle.active:
            return self._handle
        return None

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Call ``listener`` with the new view after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ==================================================================
    # Intents
    # ==================================================================

    def answer(self, question_key: str, code: str) -> ScreenerView:
        """Record an answer for the current question screen and advance."""
        try:
            target = self._graph.transition(self._session.screen, question_key, code)
        except InvalidTransitionError:
            if self._strict:
                raise
            logger.warning(
                "Ignoring invalid answer %s=%s on screen %s",
                question_key, code, self._session.screen.value,
            )
            return self.view()

        self._session.answers.record(question_key, code)
        self._enter(target)
        return self.view()

    def advance_manually(self, target: Screen | str) -> ScreenerView:
        """Follow a manual edge from the current screen.

        A target of ``entry`` resets the session.
        """
        current = self._session.screen
        if not self._graph.is_manual_edge(current, target):
            err = InvalidTransitionError(current.value, None, getattr(target, "value", str(target)))
            if self._strict:
                raise err
            logger.warning("Ignoring manual navigation: %s", err)
            return self.view()

        screen = Screen(target)
        if screen is Screen.ENTRY:
            return self.reset()
        self._enter(screen)
        return self.view()

    def reset(self) -> ScreenerView:
        """Return to the initial session, cancelling any processing run."""
        self._cancel_processing()
        self._session = ScreenerSession()
        logger.debug("session reset")
        self._notify()
        return self.view()

    def on_enter_processing(self) -> CancelHandle:
        """Start the processing sequence, replacing any run in flight."""
        self._cancel_processing()
        messages = self._sequencer.messages
        self._session.status_message = messages[0] if messages else None
        self._handle = self._sequencer.start(
            self._on_processing_message, self._on_processing_complete,
        )
        return self._handle

    async def submit_lead(self, email: str, sink: LeadSink) -> LeadSubmission:
        """Send the answers plus ``email`` to ``sink``.

        Success resets the session.  Failure (invalid email or a sink
        returning False) keeps the session on lead capture with ``error``
        set; there is no automatic retry.

        The result only touches the session it was submitted from: if that
        session was reset or left lead capture while the sink was awaited,
        the outcome is reported but the current session is left alone.

        Raises:
            ValueError: if the session is not on the lead-capture screen,
                or a submission for it is already in progress.
        """
        session = self._session
        if session.screen is not Screen.LEAD_CAPTURE:
            raise ValueError(
                f"Lead submission is only valid during lead_capture, "
                f"current screen is '{session.screen.value}'"
            )
        if session.lead_pending:
            raise ValueError("Lead submission already in progress for this session")

        try:
            lead = LeadRecord.from_answers(email, session.answers)
        except ValidationError:
            return self._lead_failed(session, INVALID_EMAIL_MESSAGE)

        session.lead_pending = True
        try:
            ok = await sink.submit(lead)
        finally:
            session.lead_pending = False

        if not ok:
            logger.warning("Lead sink reported failure")
            return self._lead_failed(session, LEAD_FAILURE_MESSAGE)

        if not self._is_current_lead_capture(session):
            logger.info("Lead submitted after the session moved on; not resetting")
            return LeadSubmission(ok=True, view=self.view())

        logger.info("Lead submitted; resetting session")
        view = self.reset()
        return LeadSubmission(ok=True, view=view)

    def dispose(self) -> None:
        """Cancel pending timers and drop listeners (session is discarded)."""
        self._cancel_processing()
        self._listeners.clear()

    # ==================================================================
    # View-model
    # ==================================================================

    def view(self) -> ScreenerView:
        s = self._session
        question = self._graph.question_for(s.screen)

        hint = None
        if question is not None:
            stored = s.answers.get(question.key)
            opt = question.option(stored) if stored is not None else None
            hint = opt.hint if opt is not None else None

        tracks = self._composer.compose(s.answers) if s.screen is Screen.OUTCOME else []
        actions = [
            NavigationAction(target=e.target, label=e.label)
            for e in self._graph.manual_edges(s.screen)
        ]
        return ScreenerView(
            screen=s.screen,
            kind=s.screen.kind,
            progress=s.progress,
            answers=s.answers.snapshot(),
            recommendation_tracks=tracks,
            question=question,
            hint=hint,
            status_message=s.status_message if s.screen is Screen.PROCESSING else None,
            error=s.error,
            actions=actions,
        )

    # ==================================================================
    # Internals
    # ==================================================================

    def _enter(self, screen: Screen) -> None:
        previous = self._session.screen
        if previous is Screen.PROCESSING and screen is not Screen.PROCESSING:
            self._cancel_processing()

        self._session.screen = screen
        self._session.progress = progress_for(screen)
        self._session.error = None
        if screen is not Screen.PROCESSING:
            self._session.status_message = None
        logger.debug("screen %s -> %s (progress %d)", previous.value, screen.value, self._session.progress)

        if screen is Screen.PROCESSING:
            self.on_enter_processing()
        self._notify()

    def _on_processing_message(self, text: str) -> None:
        self._session.status_message = text
        self._notify()

    def _on_processing_complete(self) -> None:
        self._handle = None
        if self._session.screen is not Screen.PROCESSING:
            logger.debug("stale processing completion ignored")
            return
        self._enter(Screen.OUTCOME)

    def _cancel_processing(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _is_current_lead_capture(self, session: ScreenerSession) -> bool:
        return session is self._session and session.screen is Screen.LEAD_CAPTURE

    def _lead_failed(self, session: ScreenerSession, message: str) -> LeadSubmission:
        # The session may have moved on while the sink was awaited.
        if self._is_current_lead_capture(session):
            session.error = message
            self._notify()
        return LeadSubmission(ok=False, error=message, view=self.view())

    def _notify(self) -> None:
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            listener(view)
