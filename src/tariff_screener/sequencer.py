"""ProcessingSequencer — the timed "computing results" interstitial.

The sequencer shows a fixed, ordered list of status messages and then fires
a completion callback that moves the session to the outcome screen.  Every
timer is scheduled up-front at its absolute offset from ``start``, so a late
timer never shifts the ones after it:

    t = 0 * interval   message 1
    t = 1 * interval   message 2
    t = 2 * interval   message 3
    t = 3 * interval   message 4
    t = 4 * interval   completion

Nothing is delivered synchronously inside ``start``; even the first message
goes through the scheduler.  ``CancelHandle.cancel()`` cancels every pending
timer and flips a flag that each callback checks first, so a timer that
fires after cancellation is a guaranteed no-op.

Scheduling is injected through the :class:`Scheduler` protocol.
:class:`AsyncioScheduler` binds to the running event loop; tests use a
virtual clock.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol, Sequence

from tariff_screener.constants import PROCESSING_MESSAGES, STAGE_INTERVAL_MS

logger = logging.getLogger(__name__)

MessageCallback = Callable[[str], None]
CompleteCallback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay (in seconds)."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules onto an asyncio event loop.

    Args:
        loop: the loop to use; defaults to the loop running when
            :meth:`call_later` is first called.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class CancelHandle:
    """Handle returned by :meth:`ProcessingSequencer.start`."""

    def __init__(self) -> None:
        self._timers: list[TimerHandle] = []
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        """True once the completion callback has fired."""
        return self._done

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> None:
        """Stop all pending messages and the completion callback.

        Idempotent; a no-op after completion.
        """
        if not self.active:
            return
        self._cancelled = True
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        logger.debug("processing sequence cancelled")

    def _add(self, timer: TimerHandle) -> None:
        self._timers.append(timer)

    def _finish(self) -> None:
        self._done = True
        self._timers.clear()


class ProcessingSequencer:
    """Runs the processing messages on a scheduler.

    Args:
        scheduler: where timers are scheduled
        messages: status messages in display order
        interval_ms: spacing between consecutive stages
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        messages: Sequence[str] = PROCESSING_MESSAGES,
        interval_ms: int = STAGE_INTERVAL_MS,
    ) -> None:
        # Distinct offsets keep delivery order independent of how the
        # scheduler breaks ties between timers due at the same instant.
        if interval_ms < 1:
            raise ValueError(f"interval_ms must be >= 1, got {interval_ms}")
        self._scheduler = scheduler
        self._messages = tuple(messages)
        self._interval_ms = interval_ms

    @property
    def messages(self) -> tuple[str, ...]:
        return self._messages

    @property
    def total_ms(self) -> int:
        """Offset of the completion callback from start."""
        return len(self._messages) * self._interval_ms

    def offsets_ms(self) -> list[int]:
        """Offsets of each message from start, in milliseconds."""
        return [i * self._interval_ms for i in range(len(self._messages))]

    def start(self, on_message: MessageCallback, on_complete: CompleteCallback) -> CancelHandle:
        """Schedule all messages and the completion callback.

        Returns a :class:`CancelHandle`; cancelling it before completion
        prevents every not-yet-delivered callback from running.

        Nothing is delivered synchronously: the first message is a timer at
        offset 0 like the rest.  A cancel that lands before the scheduler
        dispatches it yields no callbacks at all, while a cancel anywhere
        inside the first interval (after that dispatch) has already seen
        exactly one message.
        """
        handle = CancelHandle()

        for offset, text in zip(self.offsets_ms(), self._messages):
            handle._add(
                self._scheduler.call_later(offset / 1000, self._message_cb(handle, on_message, text))
            )

        def _complete() -> None:
            if not handle.active:
                return
            handle._finish()
            logger.debug("processing sequence complete")
            on_complete()

        handle._add(self._scheduler.call_later(self.total_ms / 1000, _complete))
        logger.debug(
            "processing sequence started: %d messages, %d ms",
            len(self._messages), self.total_ms,
        )
        return handle

    @staticmethod
    def _message_cb(handle: CancelHandle, on_message: MessageCallback, text: str) -> Callable[[], None]:
        def _fire() -> None:
            if not handle.active:
                return
            on_message(text)

        return _fire
