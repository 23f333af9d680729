"""
Streaming chat endpoint.

Replies are delivered as server-sent events. Request problems (missing
content, unknown session) are answered with ordinary JSON errors before the
stream is opened; once it is open, failures are reported as an ``error``
event.
"""

import asyncio
from typing import AsyncIterator
from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.responses import StreamingResponse

from dsa_tutor.api.dependencies import get_current_user_id, get_session_chat_service
from dsa_tutor.exceptions import ValidationError, NotFoundError, DatabaseError
from dsa_tutor.models.chat_models import StreamMessageRequest, StreamEvent
from dsa_tutor.models.error_models import ErrorResponse
from dsa_tutor.services.session_chat_service import SessionChatService, STREAM_FAILURE_MESSAGE
from dsa_tutor.utils.logging_config import get_logger, log_error_context

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])

logger = get_logger("message_router")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _sse_generator(events: AsyncIterator[StreamEvent], session_id: str) -> AsyncIterator[str]:
    """Format stream events as SSE frames."""
    try:
        async for event in events:
            yield event.to_sse()
    except asyncio.CancelledError:
        logger.info(f"SSE stream for session {session_id} cancelled by client")
        raise
    except Exception as e:
        log_error_context(logger, e, {"session_id": session_id, "stage": "streaming"})
        yield StreamEvent.for_error(STREAM_FAILURE_MESSAGE).to_sse()


@router.post("/stream", responses={
    200: {"content": {"text/event-stream": {}}, "description": "Server-sent event stream"},
    400: {"model": ErrorResponse, "description": "Missing session ID or content"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Session not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"}
})
async def stream_message(
    stream_request: StreamMessageRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    session_chat_service: SessionChatService = Depends(get_session_chat_service)
) -> StreamingResponse:
    """
    Send a message and stream the tutor's reply.

    **Events** (each a ``data:`` line followed by a blank line):
    - ``{"type": "content", "token": "..."}`` for each reply fragment
    - ``{"type": "complete", "messageId": 42}`` once the reply is stored
    - ``{"type": "error", "error": "..."}`` if generation fails mid-stream
    """
    request_context = {
        "method": request.method,
        "url": str(request.url),
        "client_ip": request.client.host if request.client else "unknown",
        "user_id": user_id,
        "session_id": stream_request.session_id
    }

    logger.info("Opening message stream", extra=request_context)

    try:
        events = await session_chat_service.stream_message(
            stream_request.session_id,
            user_id,
            stream_request.content,
            client_message_id=stream_request.client_message_id
        )

    except ValidationError as e:
        logger.warning(f"Invalid stream request: {e.message}", extra=request_context)
        raise HTTPException(status_code=400, detail=e.message)

    except NotFoundError as e:
        logger.warning("Session not found for stream", extra=request_context)
        raise HTTPException(status_code=404, detail=e.message)

    except DatabaseError as e:
        log_error_context(logger, e, request_context)
        raise HTTPException(status_code=500, detail="Failed to start message stream")

    return StreamingResponse(
        _sse_generator(events, stream_request.session_id),
        media_type="text/event-stream",
        headers=SSE_HEADERS
    )
