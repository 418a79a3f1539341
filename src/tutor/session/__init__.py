"""Session persistence."""

from .store import SessionStore, Turn, current_session, delete_session, list_sessions, session_path

__all__ = [
    "SessionStore",
    "Turn",
    "current_session",
    "delete_session",
    "list_sessions",
    "session_path",
]
