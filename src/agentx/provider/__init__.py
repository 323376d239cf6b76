"""Provider module - LLM provider abstraction."""

from .base import (
    STOP_REASONS,
    BaseProvider,
    GenerationResult,
    ProviderError,
    ProviderOptions,
    RawGenerationResult,
    RawModeUnavailableError,
    RawProvider,
    is_raw_unavailable,
)
from .claude import ClaudeProvider
from .registry import get_provider, register_provider, list_providers

__all__ = [
    "STOP_REASONS",
    "BaseProvider",
    "RawProvider",
    "GenerationResult",
    "RawGenerationResult",
    "ProviderOptions",
    "ProviderError",
    "RawModeUnavailableError",
    "is_raw_unavailable",
    "ClaudeProvider",
    "get_provider",
    "register_provider",
    "list_providers",
]
