"""Ephemeral login sessions."""

from passgate.sessions.session_store import Session, SessionStore

__all__ = ["Session", "SessionStore"]
