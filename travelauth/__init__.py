from .models import SessionStatus, SessionView, TokenPair, User
from .session import SessionManager, configure_session_manager, get_session_manager

__all__ = [
    "SessionManager",
    "SessionStatus",
    "SessionView",
    "TokenPair",
    "User",
    "configure_session_manager",
    "get_session_manager",
]
