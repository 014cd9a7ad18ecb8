"""
SCRIPTORIUM - Completion Provider Base

Shared request/response models and the abstract provider every vendor
adapter derives from:
- Chat messages and JSON-schema output formats
- Per-vendor options as a discriminated union on ``provider``
- CompletionResult with grounding sources and supports
- Prompt templates with ``{key}`` hydration
- Tracing, logging and error classification around every request
"""
from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Mapping, Optional, Sequence, Tuple, Type, Union

from opentelemetry.trace import SpanKind
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from core.errors import (
    ErrorContext,
    ProviderConfigError,
    ProviderError,
    ProviderResponseError,
    ScriptoriumError,
    ScriptoriumTimeoutError,
    classify_error,
)
from observability import ProviderLogger, get_tracer
from providers.prompts import BUILTIN_PROMPTS, HydratedPrompt, PromptTemplate, hydrate_prompt


# =============================================================================
# REQUEST MODELS
# =============================================================================

class Message(BaseModel):
    """A single chat message."""

    role: Literal["system", "user", "assistant"]
    content: Any

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)


class JsonSchemaFormat(BaseModel):
    """Structured-output request: the answer must match ``json_schema``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    json_schema: Dict[str, Any] = Field(..., alias="schema")
    strict: bool = True

    @classmethod
    def from_model(cls, model: Type[BaseModel], name: Optional[str] = None, strict: bool = True) -> "JsonSchemaFormat":
        """Build the format from a pydantic model's JSON schema."""
        schema = model.model_json_schema()
        if strict:
            schema.setdefault("additionalProperties", False)
        return cls(name=name or model.__name__, schema=schema, strict=strict)


class _BaseOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    stop: Optional[List[str]] = None
    response_format: Optional[JsonSchemaFormat] = None


class OpenAIOptions(_BaseOptions):
    """Request options understood by the OpenAI chat completions API."""

    provider: Literal["openai"] = "openai"
    model: str = "gpt-4o-mini"
    max_tokens: Optional[int] = Field(default=None, ge=1)
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    store: bool = False


class GeminiOptions(_BaseOptions):
    """Request options understood by the Gemini API."""

    provider: Literal["gemini"] = "gemini"
    model: str = "gemini-2.0-flash"
    datastore: Optional[str] = Field(
        default=None, description="Vertex AI Search datastore used for grounded retrieval"
    )


CompletionOptions = Annotated[Union[OpenAIOptions, GeminiOptions], Field(discriminator="provider")]

_options_adapter: TypeAdapter[CompletionOptions] = TypeAdapter(CompletionOptions)


def parse_options(data: Mapping[str, Any]) -> Union[OpenAIOptions, GeminiOptions]:
    """Validate a plain mapping into the options type named by its ``provider`` key."""
    return _options_adapter.validate_python(dict(data))


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class GroundingSource(BaseModel):
    """A document the answer was grounded on."""

    title: Optional[str] = None
    content: Optional[str] = None
    uri: Optional[str] = None


class GroundingSegment(BaseModel):
    start_index: int = 0
    end_index: int = 0
    text: str = ""


class GroundingSupport(BaseModel):
    """Links a span of the answer to the sources backing it."""

    segment: GroundingSegment
    grounding_chunk_indices: List[int] = Field(default_factory=list)
    confidence_scores: List[float] = Field(default_factory=list)


class CompletionResult(BaseModel):
    """Outcome of one completion request."""

    text: str
    data: Optional[Any] = None  # parsed JSON when a response_format was requested
    sources: List[GroundingSource] = Field(default_factory=list)
    grounding_supports: List[GroundingSupport] = Field(default_factory=list)
    model: str

    @property
    def payload(self) -> Any:
        """Structured data if present, else the raw text."""
        return self.data if self.data is not None else self.text


# =============================================================================
# PROVIDER BASE
# =============================================================================

OptionsT = Union[OpenAIOptions, GeminiOptions]


class AIProvider(ABC):
    """
    Abstract completion provider.

    Subclasses implement ``_complete`` against their vendor SDK; ``complete``
    adds option defaults, tracing, logging and error classification. Vendor
    exceptions surface as ``ScriptoriumTimeoutError`` when they are timeouts
    and ``ProviderError`` otherwise, never raw.
    """

    name: ClassVar[str]
    options_type: ClassVar[Type[OptionsT]]
    # SDK exception types that mean the request timed out
    timeout_errors: ClassVar[Tuple[Type[BaseException], ...]] = ()

    def __init__(self, api_key: str, **option_defaults: Any):
        if not api_key:
            raise ProviderConfigError(
                f"{self.name} API key is required",
                config_key=f"{self.name.upper()}_API_KEY",
            )
        self.api_key = api_key
        self.option_defaults: Dict[str, Any] = {k: v for k, v in option_defaults.items() if v is not None}
        self.prompts: Dict[str, PromptTemplate] = dict(BUILTIN_PROMPTS)
        self._tracer = get_tracer(f"scriptorium.providers.{self.name}")
        self._log = ProviderLogger(self.name)

    def get_prompt_template(self, prompt_id: str) -> Optional[PromptTemplate]:
        return self.prompts.get(prompt_id)

    def hydrate_prompt(self, template: PromptTemplate, variables: Mapping[str, str]) -> HydratedPrompt:
        return hydrate_prompt(template, variables)

    def default_options(self, **overrides: Any) -> OptionsT:
        """Options for this provider: constructor defaults, then ``overrides``."""
        return self.options_type(**{**self.option_defaults, **overrides})

    async def complete(
        self,
        messages: Sequence[Message],
        options: Optional[OptionsT] = None,
    ) -> CompletionResult:
        """
        Send ``messages`` and return the completion.

        Raises:
            ProviderConfigError: options belong to another provider
            ProviderResponseError: structured output could not be parsed
            ScriptoriumTimeoutError: the vendor call timed out
            ProviderError: the vendor call failed
        """
        options = options or self.default_options()
        if not isinstance(options, self.options_type):
            raise ProviderConfigError(
                f"{type(options).__name__} cannot configure the {self.name} provider",
                config_key="provider",
            )

        with self._tracer.start_as_current_span(
            f"provider.{self.name}.complete",
            kind=SpanKind.CLIENT,
        ) as span:
            span.set_attribute("llm.provider", self.name)
            span.set_attribute("llm.model", options.model)
            span.set_attribute("llm.message_count", len(messages))

            self._log.request(options.model, len(messages), options.response_format is not None)
            start_time = time.perf_counter()

            try:
                result = await self._complete(list(messages), options)
            except ScriptoriumError:
                raise
            except Exception as e:
                context = ErrorContext.from_current_span(
                    operation="complete",
                    component=f"providers.{self.name}",
                    provider=self.name,
                )
                if self._is_timeout(e):
                    raise ScriptoriumTimeoutError(
                        f"{self.name} request timed out",
                        cause=e,
                        context=context,
                    ).with_context(model=options.model) from e
                raise ProviderError(
                    f"{self.name} request failed: {e}",
                    provider=self.name,
                    model=options.model,
                    cause=e,
                    context=context,
                ) from e

            duration_ms = (time.perf_counter() - start_time) * 1000
            span.set_attribute("llm.response_chars", len(result.text))
            self._log.response(result.model, duration_ms, len(result.text))
            return result

    def _is_timeout(self, error: Exception) -> bool:
        if isinstance(error, self.timeout_errors):
            return True
        return isinstance(classify_error(error), ScriptoriumTimeoutError)

    @abstractmethod
    async def _complete(self, messages: List[Message], options: OptionsT) -> CompletionResult:
        """Perform the vendor request."""
        pass

    def _parse_json(self, text: str, model: str) -> Any:
        try:
            return json.loads(text)
        except (TypeError, ValueError) as e:
            raise ProviderResponseError(
                f"{self.name} returned invalid JSON",
                raw_response=text,
                provider=self.name,
                model=model,
                cause=e,
            ) from e
