# Services package

from .session_service import SessionService
from .session_chat_service import SessionChatService
from .session_locks import SessionLockRegistry, session_locks
from .generation_provider import (
    GeminiProvider,
    UnconfiguredProvider,
    GenerationResult,
    StreamChunk,
    create_generation_provider,
)
from .fallback_responder import FallbackResponder, FallbackRule, FALLBACK_RULES
from .concept_tagger import extract_dsa_concepts

__all__ = [
    # Persistence and pipeline
    "SessionService",
    "SessionChatService",
    "SessionLockRegistry",
    "session_locks",
    # Generation
    "GeminiProvider",
    "UnconfiguredProvider",
    "GenerationResult",
    "StreamChunk",
    "create_generation_provider",
    "FallbackResponder",
    "FallbackRule",
    "FALLBACK_RULES",
    "extract_dsa_concepts",
]
