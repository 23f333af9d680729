"""
SQLModel data models for chat sessions and message persistence.

This module defines the ChatSession and Message tables plus the API models
used to create, update and return them.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from sqlmodel import SQLModel, Field, JSON, Column
from sqlalchemy import DateTime, String, Text, Index, UniqueConstraint
from sqlalchemy.types import TypeDecorator


DifficultyLevel = Literal["beginner", "intermediate", "advanced"]
MessageRole = Literal["user", "assistant", "system"]

DEFAULT_SESSION_TITLE = "New Chat Session"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timestamp column that always binds and loads aware UTC datetimes.

    SQLite has no timezone storage and hands values back naive, so the UTC
    offset is restored on load.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


def _timestamp_column() -> Column:
    return Column(UTCDateTime(), nullable=False)


class SessionContext(SQLModel):
    """Tutoring context stored with each session."""
    current_topic: Optional[str] = Field(default=None, max_length=200)
    difficulty_level: DifficultyLevel = "beginner"
    last_concept: Optional[str] = Field(default=None, max_length=200)


class MessageMetadata(SQLModel):
    """Metadata recorded on assistant messages."""
    tokens_used: Optional[int] = None
    model_version: Optional[str] = None
    is_dsa_concept: Optional[bool] = None
    concept_tags: Optional[List[str]] = None
    reply_to: Optional[int] = None
    streamed: Optional[bool] = None


# Database table models

class ChatSession(SQLModel, table=True):
    """
    A persisted conversation thread owned by exactly one user.

    ``message_count`` and ``tokens_used`` only grow, and only the chat pipeline
    changes them after an exchange has been written.
    """
    __tablename__ = "chat_sessions"

    id: str = Field(primary_key=True, max_length=64, description="Opaque session identifier")
    user_id: str = Field(max_length=64, description="Owning user identifier")
    title: str = Field(default=DEFAULT_SESSION_TITLE, sa_column=Column(String(200), nullable=False))
    context: Dict[str, Any] = Field(
        default_factory=lambda: {"difficulty_level": "beginner"},
        sa_column=Column(JSON),
        description="Tutoring context: current_topic, difficulty_level, last_concept"
    )
    created_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())
    last_active_at: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())
    is_active: bool = Field(default=True)
    message_count: int = Field(default=0, ge=0)
    tokens_used: int = Field(default=0, ge=0)

    __table_args__ = (
        Index('idx_chat_session_user_id', 'user_id'),
        Index('idx_chat_session_user_last_active', 'user_id', 'last_active_at'),
    )


class Message(SQLModel, table=True):
    """
    One immutable message within a session.

    Messages are created in user/assistant pairs and removed only when their
    session is deleted.
    """
    __tablename__ = "chat_messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(foreign_key="chat_sessions.id", max_length=64)
    user_id: str = Field(max_length=64)
    role: str = Field(sa_column=Column(String(20), nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))
    timestamp: datetime = Field(default_factory=utc_now, sa_column=_timestamp_column())
    message_metadata: Optional[Dict[str, Any]] = Field(default_factory=dict, sa_column=Column(JSON))
    client_message_id: Optional[str] = Field(default=None, max_length=100)

    __table_args__ = (
        Index('idx_chat_message_session_timestamp', 'session_id', 'timestamp'),
        UniqueConstraint('session_id', 'client_message_id', name='uq_chat_message_client_id'),
    )


# API models for requests and responses

class SessionCreate(SQLModel):
    """Model for creating a new session."""
    title: Optional[str] = Field(default=None, max_length=200)
    difficulty_level: DifficultyLevel = "beginner"
    current_topic: Optional[str] = Field(default=None, max_length=200)


class SessionUpdate(SQLModel):
    """Model for updating an existing session. Counters are not updatable."""
    title: Optional[str] = Field(default=None, max_length=200)
    is_active: Optional[bool] = None
    current_topic: Optional[str] = Field(default=None, max_length=200)
    difficulty_level: Optional[DifficultyLevel] = None
    last_concept: Optional[str] = Field(default=None, max_length=200)


class SessionPublic(SQLModel):
    """Public model for session data returned by API."""
    id: str
    user_id: str
    title: str
    context: SessionContext
    created_at: datetime
    updated_at: datetime
    last_active_at: datetime
    is_active: bool
    message_count: int
    tokens_used: int


class MessageCreate(SQLModel):
    """Model for creating a new message."""
    session_id: str
    user_id: str
    role: MessageRole
    content: str = Field(min_length=1)
    message_metadata: Dict[str, Any] = Field(default_factory=dict)
    client_message_id: Optional[str] = Field(default=None, max_length=100)


class MessagePublic(SQLModel):
    """Public model for message data returned by API."""
    id: int
    session_id: str
    role: str
    content: str
    timestamp: datetime
    message_metadata: Dict[str, Any] = Field(default_factory=dict)
    client_message_id: Optional[str] = None


class SessionWithMessages(SQLModel):
    """A session together with its full ordered message history."""
    session: SessionPublic
    messages: List[MessagePublic] = Field(default_factory=list)


class SessionDeleteResponse(SQLModel):
    """Result of deleting a session and its messages."""
    session_id: str
    deleted_messages: int


class ChatResponse(SQLModel):
    """Result of one exchange: both persisted messages and the updated session."""
    user_message: MessagePublic
    assistant_message: MessagePublic
    session: SessionPublic
