"""In-memory login sessions with sliding expiry and periodic sweeping."""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from passgate.settings import PassgateSettings

DEFAULT_SESSION_TTL_SECONDS = 72000  # 20 hours
SWEEP_INTERVAL_SECONDS = 900  # 15 minutes

logger = structlog.get_logger()


@dataclass
class Session:
    """Login state tracked for one session id."""

    session_id: str
    username: str = ""  # empty until a login binds a user
    expires_at: float = 0.0  # time.time() based, pushed forward on each fetch


class SessionStore:
    """Thread-safe map of session id to Session with sliding expiry.

    Unknown or expired ids get a brand-new session on fetch, so any id "just
    works". The store does not check id entropy: callers must hand out
    unpredictable ids (e.g. secrets.token_urlsafe(32)).

    Callers get copies; re-fetch by id instead of holding on to a Session.
    Call start_sweeper() on app startup and stop_sweeper() on shutdown.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
        sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._sweep_interval_seconds = sweep_interval_seconds
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._sweep_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(cls, settings: PassgateSettings) -> SessionStore:
        return cls(
            ttl_seconds=settings.session_ttl.total_seconds(),
            sweep_interval_seconds=settings.session_sweep_interval.total_seconds(),
        )

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def _fetch_locked(self, session_id: str) -> Session:
        now = time.time()
        session = self._sessions.get(session_id)
        if session is not None and session.expires_at > now:
            session.expires_at += self._ttl_seconds
            return session
        session = Session(session_id=session_id, expires_at=now + self._ttl_seconds)
        self._sessions[session_id] = session
        return session

    def fetch(self, session_id: str) -> Session:
        """Return the live session for session_id, creating a fresh one if needed.

        A live session has its expiry extended by the session TTL.
        """
        with self._lock:
            return dataclasses.replace(self._fetch_locked(session_id))

    def bind_username(self, session_id: str, username: str) -> Session:
        """Fetch session_id and record username on it (called after a successful login)."""
        with self._lock:
            session = self._fetch_locked(session_id)
            session.username = username
            return dataclasses.replace(session)

    def delete(self, session_id: str) -> None:
        """Remove a session (logout). Unknown ids are ignored."""
        with self._lock:
            self._sessions.pop(session_id, None)

    def sweep(self) -> int:
        """Remove every session whose expiry is at or before now. Return the count removed."""
        with self._lock:
            now = time.time()
            expired = [sid for sid, s in self._sessions.items() if s.expires_at <= now]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info("swept expired sessions", count=len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def start_sweeper(self) -> None:
        """Start the periodic sweep background task."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop_sweeper(self) -> None:
        """Stop the periodic sweep background task."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval_seconds)
            self.sweep()
