"""
Request models for the chat endpoints and the server-sent event envelope.

Content fields are optional at the schema level so that missing or empty
content reaches the pipeline and is rejected there with a 400, the same as
whitespace-only content.
"""

import json
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class SendMessageRequest(BaseModel):
    """Body of ``POST /sessions/{session_id}/messages``."""
    content: Optional[str] = Field(
        default=None,
        max_length=8000,
        description="The user's message"
    )
    client_message_id: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Idempotency key; retries with the same key reuse the stored user message"
    )


class StreamMessageRequest(BaseModel):
    """Body of ``POST /messages/stream``: ``{"sessionId": ..., "content": ...}``."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId", max_length=64)
    content: Optional[str] = Field(default=None, max_length=8000)
    client_message_id: Optional[str] = Field(default=None, alias="clientMessageId", max_length=100)


class StreamEvent(BaseModel):
    """
    One server-sent event of a streamed exchange.

    Serialized as a single ``data:`` line followed by a blank line:

    - ``{"type": "content", "token": "..."}`` for each generated fragment
    - ``{"type": "complete", "messageId": ...}`` once the reply is persisted
    - ``{"type": "error", "error": "..."}`` when generation fails mid-stream
    """
    type: Literal["content", "complete", "error"]
    token: Optional[str] = None
    message_id: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def for_token(cls, token: str) -> "StreamEvent":
        return cls(type="content", token=token)

    @classmethod
    def for_completion(cls, message_id: int) -> "StreamEvent":
        return cls(type="complete", message_id=message_id)

    @classmethod
    def for_error(cls, error: str) -> "StreamEvent":
        return cls(type="error", error=error)

    def to_payload(self) -> dict:
        if self.type == "content":
            return {"type": "content", "token": self.token}
        if self.type == "complete":
            return {"type": "complete", "messageId": self.message_id}
        return {"type": "error", "error": self.error}

    def to_sse(self) -> str:
        """Convert to SSE wire format."""
        return f"data: {json.dumps(self.to_payload())}\n\n"
