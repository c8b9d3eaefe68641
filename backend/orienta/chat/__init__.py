"""Chat sessions for the vocational-guidance assistant."""

from .manager import ConversationManager
from .schemas import ChatResult, Role, Turn
from .service import ChatService, build_chat_service, get_chat_service, set_chat_service
from .store import SessionStore

__all__ = [
    "ConversationManager",
    "ChatResult",
    "Role",
    "Turn",
    "ChatService",
    "build_chat_service",
    "get_chat_service",
    "set_chat_service",
    "SessionStore",
]
