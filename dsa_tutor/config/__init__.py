# Configuration package for the DSA tutor chat API

from .settings import (
    AppConfig,
    ProviderConfig,
    PipelineConfig,
    AuthConfig,
    get_app_config,
    reload_app_config
)

from .system_instructions import (
    DSA_TUTOR_INSTRUCTION,
    DIFFICULTY_LEVELS,
    get_system_instruction,
    build_system_instruction
)

__all__ = [
    # Runtime configuration
    "AppConfig",
    "ProviderConfig",
    "PipelineConfig",
    "AuthConfig",
    "get_app_config",
    "reload_app_config",

    # System instructions
    "DSA_TUTOR_INSTRUCTION",
    "DIFFICULTY_LEVELS",
    "get_system_instruction",
    "build_system_instruction"
]
