"""
Runtime configuration for the DSA tutor chat API.

Each concern is a dataclass with a ``from_env`` constructor so tests can build
configurations directly while the application reads them from the environment
(populated from ``.env`` by python-dotenv in ``main``).
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dsa_tutor.exceptions import ConfigurationError


PLACEHOLDER_API_KEYS = {"", "your-gemini-api-key-here", "your-google-api-key-here"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@dataclass
class ProviderConfig:
    """Configuration for the Gemini generation provider."""
    api_key: Optional[str] = None
    model_name: str = "gemini-2.5-flash"
    temperature: float = 0.7
    max_output_tokens: int = 1000
    timeout_seconds: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and self.api_key.strip() not in PLACEHOLDER_API_KEYS

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Create ProviderConfig from environment variables."""
        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            model_name=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            temperature=_env_float("GENERATION_TEMPERATURE", 0.7),
            max_output_tokens=_env_int("GENERATION_MAX_OUTPUT_TOKENS", 1000),
            timeout_seconds=_env_float("GENERATION_TIMEOUT_SECONDS", 30.0)
        )


@dataclass
class PipelineConfig:
    """Configuration for the chat message pipeline."""
    context_window: int = 10

    def __post_init__(self):
        if self.context_window < 1:
            raise ConfigurationError("CONTEXT_WINDOW must be at least 1")

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Create PipelineConfig from environment variables."""
        return cls(context_window=_env_int("CONTEXT_WINDOW", 10))


@dataclass
class AuthConfig:
    """Configuration for access token verification."""
    secret_key: Optional[str] = None
    algorithm: str = "HS256"
    cookie_name: str = "token"

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """Create AuthConfig from environment variables."""
        return cls(
            secret_key=os.getenv("JWT_KEY"),
            algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            cookie_name=os.getenv("AUTH_COOKIE_NAME", "token")
        )


@dataclass
class AppConfig:
    """Top-level application configuration."""
    environment: str = "production"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    provider: ProviderConfig = None
    pipeline: PipelineConfig = None
    auth: AuthConfig = None

    def __post_init__(self):
        if self.provider is None:
            self.provider = ProviderConfig()
        if self.pipeline is None:
            self.pipeline = PipelineConfig()
        if self.auth is None:
            self.auth = AuthConfig()

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        origins = os.getenv("CORS_ORIGINS", "http://localhost:5173")
        return cls(
            environment=os.getenv("ENVIRONMENT", "production"),
            cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
            provider=ProviderConfig.from_env(),
            pipeline=PipelineConfig.from_env(),
            auth=AuthConfig.from_env()
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary safe for logging."""
        return {
            "environment": self.environment,
            "cors_origins": self.cors_origins,
            "provider": {
                "configured": self.provider.is_configured,
                "model_name": self.provider.model_name,
                "temperature": self.provider.temperature,
                "max_output_tokens": self.provider.max_output_tokens,
                "timeout_seconds": self.provider.timeout_seconds
            },
            "pipeline": {
                "context_window": self.pipeline.context_window
            },
            "auth": {
                "secret_configured": bool(self.auth.secret_key),
                "algorithm": self.auth.algorithm,
                "cookie_name": self.auth.cookie_name
            }
        }


_app_config: Optional[AppConfig] = None


def get_app_config() -> AppConfig:
    """Get the process-wide configuration, reading the environment on first use."""
    global _app_config
    if _app_config is None:
        _app_config = AppConfig.from_env()
    return _app_config


def reload_app_config() -> AppConfig:
    """Re-read configuration from the environment."""
    global _app_config
    _app_config = AppConfig.from_env()
    return _app_config
