"""
Shared FastAPI dependencies: configuration, authentication and services.
"""

from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status
from sqlmodel import Session

from dsa_tutor.config.database import get_session
from dsa_tutor.config.settings import AppConfig, get_app_config
from dsa_tutor.exceptions import AuthenticationError
from dsa_tutor.services.auth_service import authenticate
from dsa_tutor.services.generation_provider import GenerationProvider, create_generation_provider
from dsa_tutor.services.session_chat_service import SessionChatService
from dsa_tutor.services.session_service import SessionService
from dsa_tutor.utils.logging_config import get_logger


logger = get_logger("dependencies")


def get_config() -> AppConfig:
    """Dependency returning the process-wide configuration."""
    return get_app_config()


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    config: AppConfig = Depends(get_config)
) -> str:
    """
    Verify the caller's access token and return their user id.

    The token is read from the auth cookie, or from an
    ``Authorization: Bearer`` header when no cookie is present.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    cookie_token = request.cookies.get(config.auth.cookie_name)
    try:
        return authenticate(cookie_token, authorization, config.auth)
    except AuthenticationError as e:
        logger.info(
            f"Rejected request: {e.message}",
            extra={"method": request.method, "url": str(request.url)}
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"}
        )


def get_generation_provider(request: Request, config: AppConfig = Depends(get_config)) -> GenerationProvider:
    """
    Dependency returning the shared generation provider.

    The provider is created at startup; it is built here on first use when
    the application was started without its lifespan (e.g. in some tests).
    """
    provider = getattr(request.app.state, "generation_provider", None)
    if provider is None:
        provider = create_generation_provider(config.provider)
        request.app.state.generation_provider = provider
    return provider


def get_session_service(db: Session = Depends(get_session)) -> SessionService:
    """
    Dependency to get session service instance.

    Args:
        db: Database session from dependency injection

    Returns:
        SessionService: Configured session service instance
    """
    return SessionService(db)


def get_session_chat_service(
    db: Session = Depends(get_session),
    provider: GenerationProvider = Depends(get_generation_provider),
    config: AppConfig = Depends(get_config)
) -> SessionChatService:
    """
    Dependency to get session chat service instance.

    Args:
        db: Database session from dependency injection
        provider: Shared generation provider
        config: Application configuration

    Returns:
        SessionChatService: Chat pipeline bound to this request's database session
    """
    return SessionChatService(
        db,
        provider,
        pipeline_config=config.pipeline,
        generation_timeout=config.provider.timeout_seconds
    )
