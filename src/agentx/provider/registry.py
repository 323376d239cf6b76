"""Provider registry."""

from typing import Type, TYPE_CHECKING

from .base import BaseProvider
from .claude import ClaudeProvider

if TYPE_CHECKING:
    from agentx.config import Config


# Registered providers
PROVIDERS: dict[str, Type[BaseProvider]] = {
    "claude": ClaudeProvider,
}


def get_provider(name: str, config: "Config") -> BaseProvider:
    """
    Create a provider instance by name.

    Args:
        name: Provider name (e.g. "claude")
        config: Config object

    Returns:
        BaseProvider: provider instance

    Raises:
        ValueError: unknown provider name
    """
    if name not in PROVIDERS:
        available = list(PROVIDERS.keys())
        raise ValueError(f"Unknown provider: {name}. Available: {available}")

    return PROVIDERS[name](config)


def register_provider(name: str, provider_class: Type[BaseProvider]) -> None:
    """
    Register a provider class (for extensions).

    Args:
        name: Provider name
        provider_class: BaseProvider subclass taking a Config
    """
    PROVIDERS[name] = provider_class


def list_providers() -> list[str]:
    """Return registered provider names."""
    return list(PROVIDERS.keys())
