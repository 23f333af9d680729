# Models package

from .chat_models import SendMessageRequest, StreamMessageRequest, StreamEvent
from .error_models import ErrorResponse
from .session_models import (
    ChatSession,
    Message,
    SessionContext,
    MessageMetadata,
    SessionCreate,
    SessionUpdate,
    SessionPublic,
    SessionWithMessages,
    SessionDeleteResponse,
    MessageCreate,
    MessagePublic,
    ChatResponse,
    DEFAULT_SESSION_TITLE,
)

__all__ = [
    # Chat request and stream models
    "SendMessageRequest",
    "StreamMessageRequest",
    "StreamEvent",
    # Session models
    "ChatSession",
    "Message",
    "SessionContext",
    "MessageMetadata",
    "SessionCreate",
    "SessionUpdate",
    "SessionPublic",
    "SessionWithMessages",
    "SessionDeleteResponse",
    "MessageCreate",
    "MessagePublic",
    "ChatResponse",
    "DEFAULT_SESSION_TITLE",
    # Error models
    "ErrorResponse",
]
