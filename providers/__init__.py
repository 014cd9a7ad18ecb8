"""
SCRIPTORIUM - Completion Providers

Vendor-neutral chat completion with OpenAI and Gemini adapters.

Usage:
    from config import get_config
    from providers import ProviderRegistry, Message

    registry = ProviderRegistry.from_config(get_config().llm)
    result = await registry.get("gemini").complete([Message.user("Hello")])
"""
from providers.base import (
    AIProvider,
    CompletionOptions,
    CompletionResult,
    GeminiOptions,
    GroundingSegment,
    GroundingSource,
    GroundingSupport,
    JsonSchemaFormat,
    Message,
    OpenAIOptions,
    parse_options,
)
from providers.gemini_provider import GeminiProvider, parse_grounding, to_gemini_schema
from providers.openai_provider import OpenAIProvider
from providers.prompts import (
    APOLOGETICS_PROMPT,
    BUILTIN_PROMPTS,
    COMMENTARY_SYSTEM_PROMPT,
    CROSS_REFERENCE_PROMPT,
    CROSS_REFERENCE_SYSTEM_PROMPT,
    DEFAULT_PROMPT,
    HydratedPrompt,
    PromptTemplate,
    build_commentary_prompt,
    hydrate_prompt,
)
from providers.registry import ProviderRegistry

__all__ = [
    "AIProvider",
    "CompletionOptions",
    "CompletionResult",
    "GeminiOptions",
    "GroundingSegment",
    "GroundingSource",
    "GroundingSupport",
    "JsonSchemaFormat",
    "Message",
    "OpenAIOptions",
    "parse_options",
    "GeminiProvider",
    "parse_grounding",
    "to_gemini_schema",
    "OpenAIProvider",
    "APOLOGETICS_PROMPT",
    "BUILTIN_PROMPTS",
    "COMMENTARY_SYSTEM_PROMPT",
    "CROSS_REFERENCE_PROMPT",
    "CROSS_REFERENCE_SYSTEM_PROMPT",
    "DEFAULT_PROMPT",
    "HydratedPrompt",
    "PromptTemplate",
    "build_commentary_prompt",
    "hydrate_prompt",
    "ProviderRegistry",
]
