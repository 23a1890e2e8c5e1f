"""
Session Manager - Holds live games in memory.

The engine core assumes a single writer per game. This module provides it:
each session owns a TurnController and a lock, and every mutating call
made through the API service runs with that lock held.

Sessions are EPHEMERAL:
- No persistence to database
- A game can be exported as a snapshot and imported into a new session
- Ended sessions, and games left idle too long, are dropped by
  cleanup_stale_sessions
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import threading
import time

from ..engine_core.controller import TurnController


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # Ended before completion


class SessionExistsError(ValueError):
    """A live session already uses this game id."""


@dataclass
class Session:
    """
    One live game.

    Contains:
    - The controller owning the authoritative GameState
    - The lock serializing access to it
    - Session metadata
    """
    session_id: str
    controller: TurnController
    created_at: float
    state: SessionState = SessionState.ACTIVE
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    metadata: dict[str, Any] = field(default_factory=dict)
    last_activity: float = 0.0

    def __post_init__(self):
        if not self.last_activity:
            self.last_activity = self.created_at

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def touch(self) -> None:
        self.last_activity = time.time()

    def refresh_state(self) -> None:
        """Mark the session over once its game has ended."""
        if self.state == SessionState.ACTIVE and self.controller.state.is_over:
            self.state = SessionState.GAME_OVER


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Register games under their game id
    - Track active sessions
    - Clean up finished and idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._registry_lock = threading.Lock()

    def create_session(self, controller: TurnController, metadata: dict[str, Any] | None = None) -> Session:
        """
        Register a game. The session id is the game id.

        Raises SessionExistsError if that id is already registered; a live
        session is never replaced.
        """
        session = Session(
            session_id=controller.game_id,
            controller=controller,
            created_at=time.time(),
            metadata=metadata or {},
        )
        session.refresh_state()
        with self._registry_lock:
            if session.session_id in self._sessions:
                raise SessionExistsError(f"Session already exists: {session.session_id}")
            self._sessions[session.session_id] = session
        logger.info("Session %s created", session.session_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        with self._registry_lock:
            return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and forget it.

        Returns False if no such session exists.
        """
        with self._registry_lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        if reason == "completed":
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.info("Session %s ended (%s)", session_id, reason)
        return True

    def list_sessions(self) -> list[str]:
        with self._registry_lock:
            return list(self._sessions)

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        with self._registry_lock:
            return [
                sid for sid, session in self._sessions.items()
                if session.is_active()
            ]

    def cleanup_stale_sessions(
        self,
        max_age_seconds: int = 3600,
        max_idle_seconds: int | None = None,
    ) -> list[str]:
        """
        Drop finished sessions older than max_age.

        With max_idle_seconds, games still in progress are also dropped
        once nobody has acted on them for that long.

        Returns the removed session ids.
        """
        current_time = time.time()
        with self._registry_lock:
            candidates = list(self._sessions.items())

        stale = []
        idle = []
        for session_id, session in candidates:
            session.refresh_state()
            if session.is_active():
                if max_idle_seconds is not None and current_time - session.last_activity > max_idle_seconds:
                    idle.append(session_id)
            elif current_time - session.created_at > max_age_seconds:
                stale.append(session_id)

        for session_id in stale:
            self.end_session(session_id, reason="stale")
        for session_id in idle:
            self.end_session(session_id, reason="idle")
        return stale + idle
