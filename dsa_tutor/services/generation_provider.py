"""
Generation provider backed by the Google Gemini API (google-genai SDK).

The provider is a tagged union: ``GeminiProvider`` when a credential is
configured, ``UnconfiguredProvider`` otherwise. Both expose the same
``complete``/``stream_complete`` coroutine interface and a ``configured`` flag,
so the chat pipeline receives one injected object instead of checking for a
missing client at every call site.
"""

import asyncio
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional, Sequence, Union

from google import genai
from google.genai import errors, types

from dsa_tutor.config.settings import ProviderConfig
from dsa_tutor.exceptions import ProviderError, ProviderUnavailableError
from dsa_tutor.utils.logging_config import get_logger


# Gemini only knows "user" and "model" turns
ROLE_MAP = {
    "user": "user",
    "assistant": "model",
    "system": "model",
}

API_ERROR_MESSAGES = {
    400: "Invalid request format or parameters",
    401: "Invalid API key or authentication failed",
    403: "Access forbidden. Check API key permissions",
    404: "Model not found or invalid model name",
    429: "Rate limit exceeded. Please try again later",
    500: "Internal server error. Please try again later",
    503: "Service temporarily unavailable",
}


@dataclass
class GenerationResult:
    """Reply produced by the provider or the fallback responder."""
    content: str
    tokens_used: Optional[int] = None
    model: Optional[str] = None
    is_dsa_concept: bool = False
    concept_tags: List[str] = field(default_factory=list)
    is_fallback: bool = False
    is_error: bool = False


@dataclass
class StreamChunk:
    """One streamed text fragment; ``tokens_used`` is set once usage is reported."""
    text: str
    tokens_used: Optional[int] = None


def build_contents(history: Sequence[Dict[str, str]], user_message: str) -> List[types.Content]:
    """Convert stored history plus the new message into Gemini contents."""
    contents = []
    for message in history:
        content = message.get("content")
        if not content:
            continue
        contents.append(types.Content(
            role=ROLE_MAP.get(message.get("role"), "user"),
            parts=[types.Part(text=content)]
        ))
    contents.append(types.Content(role="user", parts=[types.Part(text=user_message)]))
    return contents


def _total_tokens(response) -> Optional[int]:
    usage = getattr(response, "usage_metadata", None)
    if usage is None:
        return None
    return getattr(usage, "total_token_count", None)


class GeminiProvider:
    """
    Shared, stateless Gemini client.

    One instance is created at startup and used concurrently by every request.
    Each call is bounded by ``config.timeout_seconds``; a timeout is reported
    as a ``ProviderError`` like any other provider failure.
    """

    configured = True

    def __init__(self, config: ProviderConfig, client: Optional[genai.Client] = None):
        if client is None and not config.is_configured:
            raise ProviderUnavailableError("Gemini API key is required to create GeminiProvider")

        self.config = config
        self.model = config.model_name
        self.logger = get_logger("generation_provider")

        if client is None:
            try:
                client = genai.Client(api_key=config.api_key)
            except Exception as e:
                raise ProviderError(f"Failed to initialize Gemini client: {str(e)}", e)
        self.client = client

    def _generation_config(self, system_instruction: Optional[str]) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=system_instruction or None,
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens
        )

    async def complete(
        self,
        system_instruction: str,
        history: Sequence[Dict[str, str]],
        user_message: str
    ) -> GenerationResult:
        """
        Generate a complete reply.

        Raises:
            ProviderError: On API errors, empty replies and timeouts
        """
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=build_contents(history, user_message),
                    config=self._generation_config(system_instruction)
                ),
                timeout=self.config.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise ProviderError(
                f"Gemini did not respond within {self.config.timeout_seconds}s", e
            )
        except errors.APIError as e:
            raise self._handle_api_error(e)
        except Exception as e:
            raise ProviderError(f"Gemini request failed: {str(e)}", e)

        text = response.text
        if not text:
            raise ProviderError("Gemini returned an empty response")

        return GenerationResult(
            content=text,
            tokens_used=_total_tokens(response),
            model=self.model
        )

    async def stream_complete(
        self,
        system_instruction: str,
        history: Sequence[Dict[str, str]],
        user_message: str
    ) -> AsyncIterator[StreamChunk]:
        """
        Stream a reply as text fragments.

        The wait for each fragment is bounded by the configured timeout.

        Raises:
            ProviderError: On API errors and timeouts, possibly after some
                fragments were already yielded
        """
        try:
            stream = await asyncio.wait_for(
                self.client.aio.models.generate_content_stream(
                    model=self.model,
                    contents=build_contents(history, user_message),
                    config=self._generation_config(system_instruction)
                ),
                timeout=self.config.timeout_seconds
            )
            iterator = stream.__aiter__()
            while True:
                try:
                    chunk = await asyncio.wait_for(
                        iterator.__anext__(), timeout=self.config.timeout_seconds
                    )
                except StopAsyncIteration:
                    break
                text = chunk.text or ""
                tokens = _total_tokens(chunk)
                if text or tokens is not None:
                    yield StreamChunk(text=text, tokens_used=tokens)
        except asyncio.TimeoutError as e:
            raise ProviderError(
                f"Gemini stream stalled for more than {self.config.timeout_seconds}s", e
            )
        except errors.APIError as e:
            raise self._handle_api_error(e)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Gemini streaming request failed: {str(e)}", e)

    def _handle_api_error(self, error: errors.APIError) -> ProviderError:
        """Map an SDK error onto a ProviderError carrying the HTTP status."""
        code = getattr(error, "code", None)
        specific_message = API_ERROR_MESSAGES.get(code, "Unknown API error")
        original = getattr(error, "message", None) or str(error)
        self.logger.warning(f"Gemini API error {code}: {original}")
        return ProviderError(
            f"{specific_message}. Original error: {original}",
            original_error=error,
            status_code=code
        )


class UnconfiguredProvider:
    """Stand-in used when no Gemini credential is configured."""

    configured = False
    model = None

    async def complete(
        self,
        system_instruction: str,
        history: Sequence[Dict[str, str]],
        user_message: str
    ) -> GenerationResult:
        raise ProviderUnavailableError("Generation provider is not configured")

    async def stream_complete(
        self,
        system_instruction: str,
        history: Sequence[Dict[str, str]],
        user_message: str
    ) -> AsyncIterator[StreamChunk]:
        raise ProviderUnavailableError("Generation provider is not configured")
        yield  # pragma: no cover


GenerationProvider = Union[GeminiProvider, UnconfiguredProvider]


def create_generation_provider(config: ProviderConfig) -> GenerationProvider:
    """Build the provider variant matching the configuration."""
    logger = get_logger("generation_provider")

    if not config.is_configured:
        logger.warning("GEMINI_API_KEY not set - replies will use the fallback responder")
        return UnconfiguredProvider()

    try:
        provider = GeminiProvider(config)
    except ProviderError as e:
        logger.error(f"Failed to initialize Gemini provider, using fallback responder: {e}")
        return UnconfiguredProvider()

    logger.info(f"Gemini provider initialized with model {config.model_name}")
    return provider
