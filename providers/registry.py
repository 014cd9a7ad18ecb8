"""
SCRIPTORIUM - Provider Registry

Maps provider names to factories and caches the instances they build.
A registry is an ordinary object: construct one, hand it to whatever needs
providers, and each registry keeps its own cache.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from config import LLMConfig
from core.errors import ProviderConfigError
from observability import get_logger
from providers.base import AIProvider
from providers.gemini_provider import GeminiProvider
from providers.openai_provider import OpenAIProvider

ProviderFactory = Callable[[], AIProvider]


@dataclass
class ProviderRegistration:
    """Registration entry for a provider."""
    factory: ProviderFactory
    instance: Optional[AIProvider] = None


class ProviderRegistry:
    """
    Registry of completion providers.

    Provides:
    - Named factory registration
    - Lazy construction with per-registry caching
    - Construction from LLMConfig
    """

    def __init__(self, default: Optional[str] = None):
        self.logger = get_logger("scriptorium.providers.registry")
        self._providers: Dict[str, ProviderRegistration] = {}
        self.default = default

    def register(self, name: str, factory: ProviderFactory) -> None:
        """
        Register a factory under ``name``.

        Re-registering replaces the factory and drops any cached instance.
        """
        if name in self._providers:
            self.logger.warning("Provider already registered, overwriting", provider=name)
        self._providers[name] = ProviderRegistration(factory=factory)

    def get(self, name: Optional[str] = None) -> AIProvider:
        """
        Get the provider called ``name`` (the registry default when omitted).

        The factory runs on first use; later calls return the same instance.

        Raises:
            ProviderConfigError: unknown name, or the factory could not build it.
        """
        name = name or self.default
        registration = self._providers.get(name) if name else None
        if registration is None:
            raise ProviderConfigError(
                f"Unknown provider: {name!r}",
                config_key="DEFAULT_PROVIDER",
                suggestions=[f"Available providers: {', '.join(self.names()) or 'none'}"],
            )

        if registration.instance is None:
            registration.instance = registration.factory()
            self.logger.info("Provider created", provider=name)
        return registration.instance

    def names(self) -> List[str]:
        return list(self._providers)

    def __contains__(self, name: str) -> bool:
        return name in self._providers

    def clear(self) -> None:
        """Drop cached instances; registrations are kept."""
        for registration in self._providers.values():
            registration.instance = None

    @classmethod
    def from_config(cls, config: LLMConfig) -> "ProviderRegistry":
        """
        Registry with ``openai`` and ``gemini`` factories built from ``config``.

        Factories are lazy: a missing API key only fails (ProviderConfigError)
        when that provider is requested.
        """
        registry = cls(default=config.default_provider)
        registry.register(
            "openai",
            lambda: OpenAIProvider(
                config.openai_api_key,
                model=config.openai_model,
                temperature=config.temperature,
            ),
        )
        registry.register(
            "gemini",
            lambda: GeminiProvider(
                config.gemini_api_key,
                model=config.gemini_model,
                temperature=config.temperature,
                datastore=config.gemini_datastore or None,
            ),
        )
        return registry
