"""
Tests for the provider registry.
"""
import pytest


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_get_caches_per_registry(self, fake_openai_client):
        from providers.openai_provider import OpenAIProvider
        from providers.registry import ProviderRegistry

        built = []

        def factory():
            provider = OpenAIProvider("sk-test", client=fake_openai_client)
            built.append(provider)
            return provider

        first, second = ProviderRegistry(), ProviderRegistry()
        first.register("openai", factory)
        second.register("openai", factory)

        assert first.get("openai") is first.get("openai")
        assert second.get("openai") is not first.get("openai")
        assert len(built) == 2

    def test_clear_drops_instances(self, fake_openai_client):
        from providers.openai_provider import OpenAIProvider
        from providers.registry import ProviderRegistry

        registry = ProviderRegistry()
        registry.register("openai", lambda: OpenAIProvider("sk-test", client=fake_openai_client))

        before = registry.get("openai")
        registry.clear()

        assert "openai" in registry
        assert registry.get("openai") is not before

    def test_unknown_provider(self):
        from core.errors import ProviderConfigError
        from providers.registry import ProviderRegistry

        with pytest.raises(ProviderConfigError):
            ProviderRegistry().get("anthropic")

    def test_from_config_defaults(self):
        from config import LLMConfig
        from providers.gemini_provider import GeminiProvider
        from providers.registry import ProviderRegistry

        config = LLMConfig(
            default_provider="gemini",
            temperature=0.2,
            openai_api_key="",
            gemini_api_key="gm-test",
            gemini_model="gemini-2.5-flash",
            gemini_datastore="",
        )
        registry = ProviderRegistry.from_config(config)

        provider = registry.get()
        assert isinstance(provider, GeminiProvider)
        options = provider.default_options()
        assert options.model == "gemini-2.5-flash"
        assert options.temperature == 0.2
        assert options.datastore is None
        assert sorted(registry.names()) == ["gemini", "openai"]

    def test_missing_key_fails_on_use(self):
        from config import LLMConfig
        from core.errors import ProviderConfigError
        from providers.registry import ProviderRegistry

        registry = ProviderRegistry.from_config(LLMConfig(openai_api_key="", gemini_api_key=""))

        with pytest.raises(ProviderConfigError) as exc_info:
            registry.get("openai")
        assert exc_info.value.config_key == "OPENAI_API_KEY"
