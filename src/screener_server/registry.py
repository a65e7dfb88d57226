"""In-memory registry of live screener sessions.

Sessions are ephemeral: each one is a :class:`ScreenerController` kept in
process memory for the life of one user engagement.  The registry evicts
sessions idle longer than the TTL and caps the number of live sessions,
dropping the least recently used first.  Evicted or deleted sessions are
disposed so their pending processing timers are cancelled.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable

from tariff_screener.controller import ScreenerController

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    controller: ScreenerController
    created_at: float = field(default_factory=time.monotonic)
    last_seen: float = field(default_factory=time.monotonic)


class SessionRegistry:
    """Maps session_id -> controller.

    Args:
        factory: builds a fresh controller for a new session
        ttl_seconds: idle eviction threshold (0 disables)
        max_sessions: cap on live sessions
        clock: monotonic time source (seconds)
    """

    def __init__(
        self,
        factory: Callable[[], ScreenerController],
        *,
        ttl_seconds: int = 3600,
        max_sessions: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._ttl = ttl_seconds
        self._max = max_sessions
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def create(self, session_id: str | None = None) -> tuple[str, ScreenerController]:
        """Register a new session.

        Raises:
            ValueError: if ``session_id`` is already live.
        """
        self.purge_expired()
        sid = session_id or uuid.uuid4().hex
        if sid in self._entries:
            raise ValueError(f"Session already exists: session_id={sid}")

        while self._max > 0 and len(self._entries) >= self._max:
            old_sid, old = self._entries.popitem(last=False)
            old.controller.dispose()
            logger.info("Evicted least recently used session %s", old_sid)

        now = self._clock()
        controller = self._factory()
        self._entries[sid] = _Entry(controller=controller, created_at=now, last_seen=now)
        logger.info("Session created: %s", sid)
        return sid, controller

    def get(self, session_id: str) -> ScreenerController | None:
        """Return the live controller and mark it as recently used."""
        self.purge_expired()
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        entry.last_seen = self._clock()
        self._entries.move_to_end(session_id)
        return entry.controller

    def require(self, session_id: str) -> ScreenerController:
        """Like :meth:`get` but raises ``ValueError`` when missing."""
        controller = self.get(session_id)
        if controller is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        return controller

    def delete(self, session_id: str) -> None:
        """Dispose and forget a session.  Raises ``ValueError`` if missing."""
        entry = self._entries.pop(session_id, None)
        if entry is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        entry.controller.dispose()
        logger.info("Session deleted: %s", session_id)

    def purge_expired(self) -> int:
        """Drop sessions idle longer than the TTL; returns how many."""
        if self._ttl <= 0:
            return 0
        cutoff = self._clock() - self._ttl
        expired = [sid for sid, e in self._entries.items() if e.last_seen < cutoff]
        for sid in expired:
            self._entries.pop(sid).controller.dispose()
        if expired:
            logger.info("Purged %d idle sessions", len(expired))
        return len(expired)

    def clear(self) -> None:
        for entry in self._entries.values():
            entry.controller.dispose()
        self._entries.clear()
