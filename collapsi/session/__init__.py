"""
Session Module - Manages in-memory games behind the API.

A session represents one play-through:
- Created when a game is started or a snapshot is imported
- Holds the controller with the authoritative game state
- Serializes access with a per-game lock
- Dropped when the game is ended or cleaned up
"""

from .manager import SessionManager, Session, SessionExistsError, SessionState

__all__ = [
    "SessionManager",
    "Session",
    "SessionExistsError",
    "SessionState",
]
