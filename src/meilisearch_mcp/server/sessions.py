# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Session store with periodic idle eviction.

Sessions map a random id to the transport serving that client. The store is
the only shared mutable state of the HTTP server; none of its mutations await,
so each one is atomic on the event loop.

Usage::

    store = SessionStore(transport_factory=SessionTransport, timeout=3600)
    await store.start()          # begin idle sweeps
    session = store.create()
    store.touch(session.id)
    await store.stop()           # cancel sweeps, close every transport
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from .transport import SessionTransport

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT = 3600.0

TransportFactory = Callable[[str], SessionTransport]


@dataclass
class Session:
    """A live client session."""

    id: str
    transport: SessionTransport
    last_activity: float
    created_at: float = field(default=0.0)


class SessionStore:
    """Keyed collection of sessions with an idle sweep.

    Args:
        transport_factory: Builds the transport for a new session id.
        timeout: Idle seconds after which a session is evicted.
        sweep_interval: Seconds between sweeps (default: timeout / 60).
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        transport_factory: TransportFactory = SessionTransport,
        timeout: float = DEFAULT_SESSION_TIMEOUT,
        sweep_interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.transport_factory = transport_factory
        self.timeout = timeout
        self.sweep_interval = sweep_interval if sweep_interval is not None else timeout / 60
        self.clock = clock
        self._sessions: dict[str, Session] = {}
        self._sweep_task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Start the periodic idle sweep."""
        if self.running:
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info(f"Session sweep started (timeout={self.timeout}s, interval={self.sweep_interval}s)")

    async def stop(self) -> None:
        """Stop the sweep and close every remaining session."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
        self.close_all()
        logger.info("Session store stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.evict_expired()
            except Exception:
                logger.exception("Idle session sweep failed")

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def create(self) -> Session:
        """Create and register a session with a fresh random id."""
        session_id = uuid.uuid4().hex
        while session_id in self._sessions:
            session_id = uuid.uuid4().hex

        now = self.clock()
        session = Session(
            id=session_id,
            transport=self.transport_factory(session_id),
            last_activity=now,
            created_at=now,
        )
        self._sessions[session_id] = session
        logger.debug(f"Session {session_id} created ({len(self._sessions)} active)")
        return session

    def get(self, session_id: str | None) -> Session | None:
        """Look up a session without refreshing its activity."""
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def touch(self, session_id: str) -> None:
        """Record activity. Unknown ids are ignored."""
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_activity = max(session.last_activity, self.clock())

    def remove(self, session_id: str) -> bool:
        """Remove a session and close its transport.

        Returns:
            True if the session existed.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        self._close(session)
        logger.debug(f"Session {session_id} removed ({len(self._sessions)} active)")
        return True

    def evict_expired(self, now: float | None = None, timeout: float | None = None) -> list[str]:
        """Remove sessions idle for longer than *timeout*.

        Returns:
            Ids of the evicted sessions.
        """
        now = self.clock() if now is None else now
        timeout = self.timeout if timeout is None else timeout

        expired = [sid for sid, s in self._sessions.items() if now - s.last_activity > timeout]
        for session_id in expired:
            session = self._sessions.pop(session_id)
            self._close(session)

        if expired:
            logger.info(f"Evicted {len(expired)} idle session(s), {len(self._sessions)} active")
        return expired

    def close_all(self) -> None:
        """Close every transport and clear the store."""
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            self._close(session)

    def _close(self, session: Session) -> None:
        try:
            session.transport.close()
        except Exception:
            logger.exception(f"Error closing transport for session {session.id}")
