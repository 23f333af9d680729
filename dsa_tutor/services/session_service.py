"""
Conversation store for chat sessions and their messages.

All reads and writes of ChatSession and Message rows go through this service.
Every query that exposes a session is keyed on both the session id and the
owning user id; a session owned by someone else looks exactly like one that
does not exist.
"""

import secrets
import string
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlmodel import Session, select, desc, delete, update, func
from sqlalchemy.exc import SQLAlchemyError

from dsa_tutor.exceptions import DatabaseError
from dsa_tutor.models.session_models import (
    ChatSession,
    Message,
    SessionCreate,
    SessionUpdate,
    SessionPublic,
    MessageCreate,
    MessagePublic,
    DEFAULT_SESSION_TITLE,
    as_utc,
    utc_now
)
from dsa_tutor.utils.logging_config import get_logger


_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_session_id() -> str:
    """Opaque session id: ``session_<epoch ms>_<9 random base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class SessionService:
    """
    Service class for session and message persistence.

    Message rows are never updated. Session counters are only changed by
    :meth:`record_exchange`, which writes the assistant message and the counter
    increments in one transaction.
    """

    def __init__(self, db_session: Session):
        """
        Initialize the session service with a database session.

        Args:
            db_session: SQLModel database session for operations
        """
        self.db = db_session
        self.logger = get_logger("session_service")

    # Sessions

    async def create_session(self, user_id: str, session_data: SessionCreate) -> SessionPublic:
        """
        Create a new, empty chat session owned by ``user_id``.

        Raises:
            DatabaseError: If the insert fails
        """
        try:
            title = (session_data.title or "").strip() or DEFAULT_SESSION_TITLE

            context: Dict[str, Any] = {"difficulty_level": session_data.difficulty_level}
            if session_data.current_topic:
                context["current_topic"] = session_data.current_topic.strip()

            db_session = ChatSession(
                id=generate_session_id(),
                user_id=user_id,
                title=title,
                context=context
            )

            self.db.add(db_session)
            self.db.commit()
            self.db.refresh(db_session)

            return SessionPublic.model_validate(db_session)

        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Failed to create session: {str(e)}")

    def _owned_session_row(self, session_id: str, user_id: str) -> Optional[ChatSession]:
        statement = select(ChatSession).where(
            ChatSession.id == session_id,
            ChatSession.user_id == user_id
        )
        return self.db.exec(statement).first()

    async def get_owned_session(self, session_id: str, user_id: str) -> Optional[SessionPublic]:
        """
        Look a session up by id and owner.

        Returns:
            SessionPublic if the session exists and belongs to ``user_id``, else None

        Raises:
            DatabaseError: If the query fails
        """
        if not session_id or not user_id:
            return None

        try:
            session = self._owned_session_row(session_id, user_id)
            if session:
                return SessionPublic.model_validate(session)
            return None

        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to retrieve session: {str(e)}")

    async def list_sessions(self, user_id: str, limit: int = 50, offset: int = 0) -> List[SessionPublic]:
        """
        List a user's sessions, most recently active first.

        Raises:
            ValueError: If limit or offset are out of range
            DatabaseError: If the query fails
        """
        if limit <= 0 or limit > 100:
            raise ValueError("Limit must be between 1 and 100")
        if offset < 0:
            raise ValueError("Offset must be non-negative")

        try:
            statement = (
                select(ChatSession)
                .where(ChatSession.user_id == user_id)
                .order_by(desc(ChatSession.last_active_at))
                .offset(offset)
                .limit(limit)
            )

            sessions = self.db.exec(statement).all()
            return [SessionPublic.model_validate(session) for session in sessions]

        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to list sessions: {str(e)}")

    async def update_session(
        self,
        session_id: str,
        user_id: str,
        updates: SessionUpdate
    ) -> Optional[SessionPublic]:
        """
        Update a session's title, active flag or tutoring context.

        Returns:
            The updated session, or None if it does not exist for this user

        Raises:
            DatabaseError: If the update fails
        """
        try:
            session = self._owned_session_row(session_id, user_id)
            if not session:
                return None

            update_data = updates.model_dump(exclude_unset=True)
            if not update_data:
                return SessionPublic.model_validate(session)

            context = dict(session.context or {})
            for field_name, value in update_data.items():
                if field_name == "title" and value and value.strip():
                    session.title = value.strip()
                elif field_name == "is_active" and value is not None:
                    session.is_active = value
                elif field_name in ("current_topic", "last_concept"):
                    if value:
                        context[field_name] = value.strip()
                    else:
                        context.pop(field_name, None)
                elif field_name == "difficulty_level" and value:
                    context["difficulty_level"] = value

            # Reassign so the JSON column is marked dirty
            session.context = context
            session.updated_at = utc_now()

            self.db.add(session)
            self.db.commit()
            self.db.refresh(session)

            return SessionPublic.model_validate(session)

        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Failed to update session: {str(e)}")

    async def delete_session_cascade(self, session_id: str, user_id: str) -> Optional[int]:
        """
        Delete a session and all of its messages in one transaction.

        Returns:
            Number of deleted messages, or None if the session does not exist
            for this user

        Raises:
            DatabaseError: If the delete fails
        """
        try:
            session = self._owned_session_row(session_id, user_id)
            if not session:
                return None

            result = self.db.exec(delete(Message).where(Message.session_id == session_id))
            deleted_messages = result.rowcount or 0

            self.db.delete(session)
            self.db.commit()

            self.logger.info(
                f"Deleted session {session_id} with {deleted_messages} messages"
            )
            return deleted_messages

        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Failed to delete session: {str(e)}")

    # Messages

    async def list_messages(
        self,
        session_id: str,
        limit: Optional[int] = None,
        exclude_id: Optional[int] = None
    ) -> List[MessagePublic]:
        """
        Return a session's messages in timestamp order.

        Args:
            session_id: Session whose messages to read
            limit: When set, only the most recent ``limit`` messages are returned
                (still oldest first)
            exclude_id: Message id to leave out, e.g. the message being answered

        Raises:
            ValueError: If limit is not positive
            DatabaseError: If the query fails
        """
        if limit is not None and limit <= 0:
            raise ValueError("Limit must be positive")

        try:
            statement = select(Message).where(Message.session_id == session_id)
            if exclude_id is not None:
                statement = statement.where(Message.id != exclude_id)

            if limit is None:
                statement = statement.order_by(Message.timestamp.asc(), Message.id.asc())
                messages = list(self.db.exec(statement).all())
            else:
                statement = statement.order_by(Message.timestamp.desc(), Message.id.desc()).limit(limit)
                messages = list(reversed(self.db.exec(statement).all()))

            return [MessagePublic.model_validate(message) for message in messages]

        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to retrieve session messages: {str(e)}")

    async def count_messages(self, session_id: str) -> int:
        """Count the messages stored for a session."""
        try:
            statement = select(func.count()).select_from(Message).where(Message.session_id == session_id)
            return int(self.db.exec(statement).one())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to count messages: {str(e)}")

    def _next_timestamp(self, session_id: str) -> datetime:
        # Never write a timestamp older than the session's latest message
        statement = select(func.max(Message.timestamp)).where(Message.session_id == session_id)
        latest = self.db.exec(statement).one()
        now = utc_now()
        if latest is not None and as_utc(latest) > now:
            return as_utc(latest)
        return now

    def _new_message(self, message_data: MessageCreate) -> Message:
        return Message(
            session_id=message_data.session_id,
            user_id=message_data.user_id,
            role=message_data.role,
            content=message_data.content,
            timestamp=self._next_timestamp(message_data.session_id),
            message_metadata=dict(message_data.message_metadata or {}),
            client_message_id=message_data.client_message_id
        )

    async def add_message(self, message_data: MessageCreate) -> MessagePublic:
        """
        Durably write one message. Session counters are not touched.

        Raises:
            DatabaseError: If the insert fails
        """
        try:
            db_message = self._new_message(message_data)

            self.db.add(db_message)
            self.db.commit()
            self.db.refresh(db_message)

            return MessagePublic.model_validate(db_message)

        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Failed to add message: {str(e)}")

    async def find_user_message(self, session_id: str, client_message_id: str) -> Optional[MessagePublic]:
        """Find the user message previously written with an idempotency key."""
        try:
            statement = select(Message).where(
                Message.session_id == session_id,
                Message.client_message_id == client_message_id,
                Message.role == "user"
            )
            message = self.db.exec(statement).first()
            return MessagePublic.model_validate(message) if message else None

        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to look up message: {str(e)}")

    async def find_reply(self, session_id: str, user_message_id: int) -> Optional[MessagePublic]:
        """Find the assistant message written in reply to ``user_message_id``."""
        try:
            statement = (
                select(Message)
                .where(
                    Message.session_id == session_id,
                    Message.role == "assistant",
                    Message.id > user_message_id
                )
                .order_by(Message.id.asc())
            )
            for message in self.db.exec(statement).all():
                if (message.message_metadata or {}).get("reply_to") == user_message_id:
                    return MessagePublic.model_validate(message)
            return None

        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to look up reply: {str(e)}")

    async def record_exchange(
        self,
        session_id: str,
        user_id: str,
        content: str,
        message_metadata: Dict[str, Any],
        message_count_delta: int = 2,
        title: Optional[str] = None,
        last_concept: Optional[str] = None
    ) -> Tuple[MessagePublic, SessionPublic]:
        """
        Write the assistant message and update the session counters atomically.

        Counters are incremented in SQL (``col = col + delta``) so concurrent
        writers cannot lose updates.

        Args:
            session_id: Session the exchange belongs to
            user_id: Owner of the session
            content: Assistant reply text
            message_metadata: Metadata for the assistant message; its
                ``tokens_used`` is added to the session total
            message_count_delta: Messages the exchange adds (user + assistant)
            title: New session title, if it should change
            last_concept: New ``last_concept`` context value, if it should change

        Returns:
            The persisted assistant message and the updated session

        Raises:
            DatabaseError: If any part of the transaction fails; nothing is written
        """
        try:
            session = self._owned_session_row(session_id, user_id)
            if session is None:
                raise DatabaseError(f"Session {session_id} disappeared during exchange")

            db_message = self._new_message(MessageCreate(
                session_id=session_id,
                user_id=user_id,
                role="assistant",
                content=content,
                message_metadata=message_metadata
            ))
            self.db.add(db_message)

            if title:
                session.title = title
            if last_concept:
                context = dict(session.context or {})
                context["last_concept"] = last_concept
                session.context = context
            self.db.add(session)

            now = utc_now()
            self.db.exec(
                update(ChatSession)
                .where(ChatSession.id == session_id)
                .values(
                    message_count=ChatSession.message_count + message_count_delta,
                    tokens_used=ChatSession.tokens_used + int(message_metadata.get("tokens_used") or 0),
                    last_active_at=now,
                    updated_at=now
                )
            )

            self.db.commit()
            self.db.refresh(db_message)
            self.db.refresh(session)

            return MessagePublic.model_validate(db_message), SessionPublic.model_validate(session)

        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Failed to record exchange: {str(e)}")
