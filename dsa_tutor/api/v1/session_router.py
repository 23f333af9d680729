"""
Session management API router for the DSA tutor chat API.

Every endpoint is scoped to the authenticated user: a session owned by
someone else is reported exactly like a missing one.
"""

from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Request, status

from dsa_tutor.api.dependencies import (
    get_current_user_id,
    get_session_service,
    get_session_chat_service
)
from dsa_tutor.exceptions import ValidationError, NotFoundError, DatabaseError
from dsa_tutor.models.chat_models import SendMessageRequest
from dsa_tutor.models.error_models import ErrorResponse
from dsa_tutor.models.session_models import (
    SessionCreate,
    SessionUpdate,
    SessionPublic,
    SessionWithMessages,
    SessionDeleteResponse,
    MessagePublic,
    ChatResponse
)
from dsa_tutor.services.session_chat_service import SessionChatService
from dsa_tutor.services.session_service import SessionService
from dsa_tutor.utils.logging_config import get_logger, log_error_context

# Create the router
router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])

# Get logger instance
logger = get_logger("session_router")

SESSION_NOT_FOUND = "Session not found or access denied"


def _request_context(request: Request, user_id: str, **extra) -> dict:
    return {
        "method": request.method,
        "url": str(request.url),
        "client_ip": request.client.host if request.client else "unknown",
        "user_id": user_id,
        **extra
    }


# Session Management Endpoints

@router.post("", response_model=SessionPublic, status_code=status.HTTP_201_CREATED, responses={
    400: {"model": ErrorResponse, "description": "Invalid session data"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    500: {"model": ErrorResponse, "description": "Internal server error"}
})
async def create_session(
    session_data: SessionCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service)
) -> SessionPublic:
    """
    Create a new, empty chat session for the caller.

    Args:
        session_data: Optional title, difficulty level and topic
        request: FastAPI request object for logging context
        user_id: Authenticated caller
        session_service: Injected session service instance

    Returns:
        SessionPublic: Created session with generated ID and timestamps
    """
    request_context = _request_context(request, user_id, session_title=session_data.title)

    logger.info("Creating new session", extra=request_context)

    try:
        session = await session_service.create_session(user_id, session_data)

        logger.info(
            "Session created successfully",
            extra={**request_context, "session_id": session.id}
        )

        return session

    except ValueError as e:
        logger.warning(f"Invalid session data: {e}", extra=request_context)
        raise HTTPException(status_code=400, detail=str(e))

    except DatabaseError as e:
        log_error_context(logger, e, request_context)
        raise HTTPException(status_code=500, detail="Failed to create session")


@router.get("", response_model=List[SessionPublic], responses={
    400: {"model": ErrorResponse, "description": "Invalid query parameters"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    500: {"model": ErrorResponse, "description": "Internal server error"}
})
async def list_sessions(
    request: Request,
    limit: int = 50,
    offset: int = 0,
    user_id: str = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service)
) -> List[SessionPublic]:
    """
    List the caller's sessions, most recently active first.

    Args:
        limit: Maximum number of sessions to return (1-100, default: 50)
        offset: Number of sessions to skip for pagination (default: 0)
    """
    request_context = _request_context(request, user_id, limit=limit, offset=offset)

    logger.info("Listing sessions", extra=request_context)

    try:
        sessions = await session_service.list_sessions(user_id, limit=limit, offset=offset)

        logger.info(
            "Sessions listed successfully",
            extra={**request_context, "session_count": len(sessions)}
        )

        return sessions

    except ValueError as e:
        logger.warning(f"Invalid query parameters: {e}", extra=request_context)
        raise HTTPException(status_code=400, detail=str(e))

    except DatabaseError as e:
        log_error_context(logger, e, request_context)
        raise HTTPException(status_code=500, detail="Failed to list sessions")


@router.get("/{session_id}", response_model=SessionWithMessages, responses={
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Session not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"}
})
async def get_session(
    session_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service)
) -> SessionWithMessages:
    """
    Retrieve a session together with its full message history.
    """
    request_context = _request_context(request, user_id, session_id=session_id)

    logger.info("Retrieving session", extra=request_context)

    try:
        session = await session_service.get_owned_session(session_id, user_id)

        if not session:
            logger.warning("Session not found", extra=request_context)
            raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)

        messages = await session_service.list_messages(session_id)

        logger.info(
            "Session retrieved successfully",
            extra={**request_context, "message_count": len(messages)}
        )
        return SessionWithMessages(session=session, messages=messages)

    except HTTPException:
        raise

    except DatabaseError as e:
        log_error_context(logger, e, request_context)
        raise HTTPException(status_code=500, detail="Failed to retrieve session")


@router.patch("/{session_id}", response_model=SessionPublic, responses={
    400: {"model": ErrorResponse, "description": "Invalid update data"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Session not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"}
})
async def update_session(
    session_id: str,
    updates: SessionUpdate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service)
) -> SessionPublic:
    """
    Update a session's title, active flag or tutoring context.
    """
    request_context = _request_context(request, user_id, session_id=session_id)

    logger.info("Updating session", extra=request_context)

    try:
        session = await session_service.update_session(session_id, user_id, updates)

        if not session:
            logger.warning("Session not found for update", extra=request_context)
            raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)

        logger.info("Session updated successfully", extra=request_context)
        return session

    except HTTPException:
        raise

    except DatabaseError as e:
        log_error_context(logger, e, request_context)
        raise HTTPException(status_code=500, detail="Failed to update session")


@router.delete("/{session_id}", response_model=SessionDeleteResponse, responses={
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Session not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"}
})
async def delete_session(
    session_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service)
) -> SessionDeleteResponse:
    """
    Delete a session and all of its messages.

    Returns:
        SessionDeleteResponse: The deleted session id and number of removed messages
    """
    request_context = _request_context(request, user_id, session_id=session_id)

    logger.info("Deleting session", extra=request_context)

    try:
        deleted_messages = await session_service.delete_session_cascade(session_id, user_id)

        if deleted_messages is None:
            logger.warning("Session not found for deletion", extra=request_context)
            raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)

        logger.info(
            "Session deleted successfully",
            extra={**request_context, "deleted_messages": deleted_messages}
        )
        return SessionDeleteResponse(session_id=session_id, deleted_messages=deleted_messages)

    except HTTPException:
        raise

    except DatabaseError as e:
        log_error_context(logger, e, request_context)
        raise HTTPException(status_code=500, detail="Failed to delete session")


# Session Message Endpoints

@router.get("/{session_id}/messages", response_model=List[MessagePublic], responses={
    400: {"model": ErrorResponse, "description": "Invalid query parameters"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Session not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"}
})
async def get_session_messages(
    session_id: str,
    request: Request,
    limit: Optional[int] = None,
    user_id: str = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service)
) -> List[MessagePublic]:
    """
    Return a session's messages oldest first.

    Args:
        limit: When given, only the most recent ``limit`` messages are returned
    """
    request_context = _request_context(request, user_id, session_id=session_id, limit=limit)

    try:
        session = await session_service.get_owned_session(session_id, user_id)
        if not session:
            logger.warning("Session not found for message listing", extra=request_context)
            raise HTTPException(status_code=404, detail=SESSION_NOT_FOUND)

        return await session_service.list_messages(session_id, limit=limit)

    except HTTPException:
        raise

    except ValueError as e:
        logger.warning(f"Invalid query parameters: {e}", extra=request_context)
        raise HTTPException(status_code=400, detail=str(e))

    except DatabaseError as e:
        log_error_context(logger, e, request_context)
        raise HTTPException(status_code=500, detail="Failed to retrieve messages")


@router.post("/{session_id}/messages", response_model=ChatResponse, responses={
    400: {"model": ErrorResponse, "description": "Empty message content"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
    404: {"model": ErrorResponse, "description": "Session not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"}
})
async def send_message(
    session_id: str,
    chat_request: SendMessageRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    session_chat_service: SessionChatService = Depends(get_session_chat_service)
) -> ChatResponse:
    """
    Send a message to a session and return the tutor's reply.

    The reply always arrives: when the generation provider is unavailable
    the fallback responder answers instead.

    Returns:
        ChatResponse: Persisted user and assistant messages plus the updated session
    """
    request_context = _request_context(
        request,
        user_id,
        session_id=session_id,
        message_length=len(chat_request.content or "")
    )

    logger.info("Processing session chat message", extra=request_context)

    try:
        response = await session_chat_service.send_message(
            session_id,
            user_id,
            chat_request.content,
            client_message_id=chat_request.client_message_id
        )

        logger.info(
            "Session chat message processed successfully",
            extra={
                **request_context,
                "response_length": len(response.assistant_message.content),
                "model_version": response.assistant_message.message_metadata.get("model_version")
            }
        )

        return response

    except ValidationError as e:
        logger.warning(f"Invalid chat request: {e.message}", extra=request_context)
        raise HTTPException(status_code=400, detail=e.message)

    except NotFoundError as e:
        logger.warning("Session not found for chat", extra=request_context)
        raise HTTPException(status_code=404, detail=e.message)

    except DatabaseError as e:
        log_error_context(logger, e, request_context)
        raise HTTPException(status_code=500, detail="Failed to process message")
