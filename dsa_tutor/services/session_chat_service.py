"""
Session-based chat pipeline for the DSA tutor.

One exchange runs through the same steps whether the reply is returned as a
single JSON object or streamed as server-sent events:

1. validate the content and check that the caller owns the session
2. persist the user message before any generation starts
3. assemble the bounded history and the session's system instruction
4. ask the generation provider, or the fallback responder when the provider
   is unconfigured, fails or times out
5. persist the assistant message and update the session counters together
"""

import asyncio
import math
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Optional, Tuple
from sqlmodel import Session

from dsa_tutor.config.settings import PipelineConfig
from dsa_tutor.config.system_instructions import build_system_instruction
from dsa_tutor.exceptions import (
    ValidationError,
    NotFoundError,
    ProviderError,
    DatabaseError
)
from dsa_tutor.models.chat_models import StreamEvent
from dsa_tutor.models.session_models import (
    MessageCreate,
    MessagePublic,
    SessionPublic,
    ChatResponse,
    DEFAULT_SESSION_TITLE
)
from dsa_tutor.services.concept_tagger import extract_dsa_concepts
from dsa_tutor.services.fallback_responder import FallbackResponder
from dsa_tutor.services.generation_provider import GenerationProvider, GenerationResult
from dsa_tutor.services.session_locks import SessionLockRegistry, session_locks
from dsa_tutor.services.session_service import SessionService
from dsa_tutor.utils.logging_config import get_logger


TITLE_WORD_LIMIT = 4
STREAM_FAILURE_MESSAGE = "Failed to generate response"


def estimate_tokens(content: str) -> int:
    """Rough token count used when the provider does not report usage."""
    return math.ceil(len(content) / 4)


def title_from_message(content: str) -> str:
    """Session title made of the first words of the opening message."""
    words = content.split()
    title = " ".join(words[:TITLE_WORD_LIMIT])
    if len(words) > TITLE_WORD_LIMIT:
        title += "..."
    return title


@dataclass
class PendingExchange:
    """A persisted user message waiting for its assistant reply."""
    session: SessionPublic
    user_message: MessagePublic
    history: List[Dict[str, str]]
    existing_reply: Optional[MessagePublic] = None


class SessionChatService:
    """
    Service class for handling chat exchanges within a session.

    Exchanges on the same session are serialized through a per-session lock so
    that ``message_count`` always equals twice the number of completed
    exchanges. Different sessions proceed concurrently.
    """

    def __init__(
        self,
        db_session: Session,
        provider: GenerationProvider,
        fallback_responder: Optional[FallbackResponder] = None,
        pipeline_config: Optional[PipelineConfig] = None,
        lock_registry: Optional[SessionLockRegistry] = None,
        generation_timeout: Optional[float] = None
    ):
        """
        Initialize the session chat service.

        Args:
            db_session: SQLModel database session for operations
            provider: Generation provider shared by all requests
            fallback_responder: Local responder used when the provider is unusable
            pipeline_config: Context window settings
            lock_registry: Registry of per-session locks
            generation_timeout: Seconds to wait for a complete reply; None
                leaves the bound to the provider
        """
        self.db = db_session
        self.provider = provider
        self.fallback_responder = fallback_responder or FallbackResponder()
        self.pipeline_config = pipeline_config or PipelineConfig()
        self.locks = lock_registry if lock_registry is not None else session_locks
        self.generation_timeout = generation_timeout
        self.session_service = SessionService(db_session)
        self.logger = get_logger("session_chat_service")

    # Buffered delivery

    async def send_message(
        self,
        session_id: str,
        user_id: str,
        content: Optional[str],
        client_message_id: Optional[str] = None
    ) -> ChatResponse:
        """
        Run one exchange and return both persisted messages.

        Args:
            session_id: Target session
            user_id: Authenticated caller
            content: Raw user message
            client_message_id: Optional idempotency key

        Returns:
            ChatResponse: User message, assistant message and updated session

        Raises:
            ValidationError: If content is empty or whitespace
            NotFoundError: If the session does not exist for this user
            DatabaseError: If the store cannot be read or written
        """
        text = self._validate_content(content)
        await self._require_session(session_id, user_id)

        async with self.locks.hold(session_id):
            exchange = await self._begin_exchange(session_id, user_id, text, client_message_id)

            if exchange.existing_reply is not None:
                self.logger.info(
                    f"Returning stored exchange for client message {client_message_id} in session {session_id}"
                )
                return ChatResponse(
                    user_message=exchange.user_message,
                    assistant_message=exchange.existing_reply,
                    session=exchange.session
                )

            result = await self._generate(exchange)
            assistant_message, session = await self._complete_exchange(exchange, result)

        return ChatResponse(
            user_message=exchange.user_message,
            assistant_message=assistant_message,
            session=session
        )

    # Streaming delivery

    async def stream_message(
        self,
        session_id: Optional[str],
        user_id: str,
        content: Optional[str],
        client_message_id: Optional[str] = None
    ) -> AsyncIterator[StreamEvent]:
        """
        Check the request and return the event stream for one exchange.

        Validation and ownership are checked here, before any event is
        produced, so the caller can still answer with a plain 400 or 404.

        Raises:
            ValidationError: If the session id or content is missing
            NotFoundError: If the session does not exist for this user
        """
        if not session_id or not session_id.strip():
            raise ValidationError("Session ID is required")
        text = self._validate_content(content)
        await self._require_session(session_id, user_id)

        return self._stream_events(session_id, user_id, text, client_message_id)

    async def _stream_events(
        self,
        session_id: str,
        user_id: str,
        text: str,
        client_message_id: Optional[str]
    ) -> AsyncIterator[StreamEvent]:
        async with self.locks.hold(session_id):
            try:
                exchange = await self._begin_exchange(session_id, user_id, text, client_message_id)
            except (NotFoundError, DatabaseError) as e:
                self.logger.error(f"Could not store streamed message for session {session_id}: {e}")
                yield StreamEvent.for_error(STREAM_FAILURE_MESSAGE)
                return

            if exchange.existing_reply is not None:
                yield StreamEvent.for_token(exchange.existing_reply.content)
                yield StreamEvent.for_completion(exchange.existing_reply.id)
                return

            fragments: List[str] = []
            reported_tokens: Optional[int] = None

            if self.provider.configured:
                system_instruction, bounded_history = self._provider_context(exchange)
                try:
                    async for chunk in self.provider.stream_complete(
                        system_instruction, bounded_history, exchange.user_message.content
                    ):
                        if chunk.tokens_used is not None:
                            reported_tokens = chunk.tokens_used
                        if chunk.text:
                            fragments.append(chunk.text)
                            yield StreamEvent.for_token(chunk.text)
                except ProviderError as e:
                    if fragments:
                        self.logger.error(
                            f"Stream for session {session_id} failed after "
                            f"{len(fragments)} fragments: {e}"
                        )
                        yield StreamEvent.for_error(STREAM_FAILURE_MESSAGE)
                        return
                    self.logger.warning(
                        f"Provider failed before streaming for session {session_id}, using fallback: {e}"
                    )

            if fragments:
                result = self._tag_provider_reply(
                    exchange,
                    GenerationResult(
                        content="".join(fragments),
                        tokens_used=reported_tokens,
                        model=self.provider.model
                    )
                )
            else:
                result = self._fallback(exchange)
                yield StreamEvent.for_token(result.content)

            try:
                assistant_message, _ = await self._complete_exchange(exchange, result, streamed=True)
            except DatabaseError as e:
                self.logger.error(f"Could not store streamed reply for session {session_id}: {e}")
                yield StreamEvent.for_error(STREAM_FAILURE_MESSAGE)
                return

            yield StreamEvent.for_completion(assistant_message.id)

    # Pipeline steps

    def _validate_content(self, content: Optional[str]) -> str:
        if content is None or not content.strip():
            raise ValidationError("Message content cannot be empty")
        return content.strip()

    async def _require_session(self, session_id: str, user_id: str) -> SessionPublic:
        session = await self.session_service.get_owned_session(session_id, user_id)
        if session is None:
            raise NotFoundError("Session not found or access denied")
        return session

    async def _begin_exchange(
        self,
        session_id: str,
        user_id: str,
        text: str,
        client_message_id: Optional[str]
    ) -> PendingExchange:
        """Persist (or reuse) the user message and load the history before it."""
        # Re-read under the lock: counters may have moved while waiting
        session = await self._require_session(session_id, user_id)

        user_message = None
        existing_reply = None
        if client_message_id:
            user_message = await self.session_service.find_user_message(session_id, client_message_id)
            if user_message is not None:
                existing_reply = await self.session_service.find_reply(session_id, user_message.id)

        if user_message is None:
            user_message = await self.session_service.add_message(MessageCreate(
                session_id=session_id,
                user_id=user_id,
                role="user",
                content=text,
                client_message_id=client_message_id
            ))

        history = []
        if existing_reply is None:
            previous = await self.session_service.list_messages(session_id, exclude_id=user_message.id)
            history = [
                {"role": message.role, "content": message.content}
                for message in previous
                if message.id < user_message.id
            ]

        return PendingExchange(
            session=session,
            user_message=user_message,
            history=history,
            existing_reply=existing_reply
        )

    def _provider_context(self, exchange: PendingExchange) -> Tuple[str, List[Dict[str, str]]]:
        system_instruction = build_system_instruction(exchange.session.context.model_dump())
        bounded_history = exchange.history[-self.pipeline_config.context_window:]
        return system_instruction, bounded_history

    async def _generate(self, exchange: PendingExchange) -> GenerationResult:
        """Ask the provider for a reply, falling back locally on any provider failure."""
        if not self.provider.configured:
            self.logger.info(f"Provider not configured, using fallback for session {exchange.session.id}")
            return self._fallback(exchange)

        system_instruction, bounded_history = self._provider_context(exchange)
        call = self.provider.complete(system_instruction, bounded_history, exchange.user_message.content)

        try:
            if self.generation_timeout is not None:
                result = await asyncio.wait_for(call, timeout=self.generation_timeout)
            else:
                result = await call
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Provider timed out after {self.generation_timeout}s for session "
                f"{exchange.session.id}, using fallback"
            )
            return self._fallback(exchange)
        except ProviderError as e:
            self.logger.warning(f"Provider failed for session {exchange.session.id}, using fallback: {e}")
            return self._fallback(exchange)

        return self._tag_provider_reply(exchange, result)

    def _fallback(self, exchange: PendingExchange) -> GenerationResult:
        return self.fallback_responder.respond(exchange.user_message.content, exchange.history)

    def _tag_provider_reply(self, exchange: PendingExchange, result: GenerationResult) -> GenerationResult:
        concept_tags = extract_dsa_concepts(exchange.user_message.content, result.content)
        result.concept_tags = concept_tags
        result.is_dsa_concept = bool(concept_tags)
        if not result.tokens_used:
            result.tokens_used = estimate_tokens(result.content)
        return result

    async def _complete_exchange(
        self,
        exchange: PendingExchange,
        result: GenerationResult,
        streamed: bool = False
    ) -> Tuple[MessagePublic, SessionPublic]:
        """Persist the reply and bump the session counters in one transaction."""
        tokens_used = result.tokens_used
        if tokens_used is None:
            tokens_used = estimate_tokens(result.content)

        metadata = {
            "tokens_used": tokens_used,
            "model_version": result.model,
            "is_dsa_concept": result.is_dsa_concept,
            "concept_tags": list(result.concept_tags),
            "reply_to": exchange.user_message.id,
        }
        if streamed:
            metadata["streamed"] = True

        title = None
        session = exchange.session
        if session.message_count == 0 and session.title == DEFAULT_SESSION_TITLE:
            title = title_from_message(exchange.user_message.content)

        last_concept = None
        if result.is_dsa_concept and result.concept_tags:
            last_concept = result.concept_tags[0]

        assistant_message, updated_session = await self.session_service.record_exchange(
            session_id=session.id,
            user_id=session.user_id,
            content=result.content,
            message_metadata=metadata,
            title=title,
            last_concept=last_concept
        )

        self.logger.info(
            f"Exchange completed for session {session.id}: model={result.model}, "
            f"tokens={tokens_used}, fallback={result.is_fallback}"
        )
        return assistant_message, updated_session
