"""
Tests for environment-driven configuration and system instructions.
"""

import pytest

from dsa_tutor.config.settings import AppConfig, PipelineConfig, ProviderConfig
from dsa_tutor.config.system_instructions import (
    DSA_TUTOR_INSTRUCTION,
    build_system_instruction,
    get_system_instruction
)
from dsa_tutor.exceptions import ConfigurationError


class TestProviderConfig:

    def test_defaults(self, monkeypatch):
        for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "GEMINI_MODEL", "GENERATION_TIMEOUT_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        config = ProviderConfig.from_env()

        assert config.model_name == "gemini-2.5-flash"
        assert config.timeout_seconds == 30.0
        assert config.is_configured is False

    def test_google_api_key_alias(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_API_KEY", "real-key")

        assert ProviderConfig.from_env().is_configured is True

    def test_invalid_number(self, monkeypatch):
        monkeypatch.setenv("GENERATION_TIMEOUT_SECONDS", "soon")

        with pytest.raises(ConfigurationError):
            ProviderConfig.from_env()


class TestPipelineConfig:

    def test_context_window_from_env(self, monkeypatch):
        monkeypatch.setenv("CONTEXT_WINDOW", "4")
        assert PipelineConfig.from_env().context_window == 4

    def test_context_window_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig(context_window=0)


class TestAppConfig:

    def test_cors_origins_are_split(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")

        config = AppConfig.from_env()

        assert config.cors_origins == ["http://a.test", "http://b.test"]

    def test_to_dict_hides_secrets(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "super-secret")
        monkeypatch.setenv("JWT_KEY", "jwt-secret")

        as_dict = AppConfig.from_env().to_dict()

        assert "super-secret" not in str(as_dict)
        assert "jwt-secret" not in str(as_dict)
        assert as_dict["provider"]["configured"] is True

    def test_is_development(self):
        assert AppConfig(environment="Development").is_development is True
        assert AppConfig().is_development is False


class TestSystemInstructions:

    def test_persona_only(self):
        assert get_system_instruction() == DSA_TUTOR_INSTRUCTION
        assert build_system_instruction(None) == DSA_TUTOR_INSTRUCTION

    def test_context_is_appended(self):
        instruction = build_system_instruction({
            "current_topic": "heaps",
            "difficulty_level": "beginner",
            "last_concept": "binary-search-trees"
        })

        assert instruction.startswith(DSA_TUTOR_INSTRUCTION)
        assert "Current focus: heaps" in instruction
        assert "beginner level" in instruction
        assert "Previously discussed: binary-search-trees" in instruction
