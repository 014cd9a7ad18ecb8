"""
SCRIPTORIUM - Gemini Provider

Content generation through the ``google-genai`` SDK, including structured
output and Vertex AI Search grounding.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from google import genai
from google.genai import types

from core.errors import ProviderConfigError
from providers.base import (
    AIProvider,
    CompletionResult,
    GeminiOptions,
    GroundingSegment,
    GroundingSource,
    GroundingSupport,
    Message,
)

_SCHEMA_TYPES = {
    "string": "STRING",
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
    "array": "ARRAY",
    "object": "OBJECT",
}


def to_gemini_schema(schema: Dict[str, Any], definitions: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Convert a JSON schema (as produced by pydantic) into Gemini's schema dialect.

    ``$ref`` pointers are inlined from ``$defs`` and ``anyOf`` with ``null``
    becomes a nullable schema. Only description, enum, items, properties and
    required are carried over; titles and defaults are dropped.

    Raises:
        ProviderConfigError: the schema uses a type Gemini cannot express.
    """
    if definitions is None:
        definitions = schema.get("$defs", {})

    if "$ref" in schema:
        name = schema["$ref"].rsplit("/", 1)[-1]
        return to_gemini_schema({**definitions[name], **{k: v for k, v in schema.items() if k != "$ref"}}, definitions)

    nullable = False
    if "anyOf" in schema:
        variants = [v for v in schema["anyOf"] if v.get("type") != "null"]
        nullable = len(variants) < len(schema["anyOf"])
        if len(variants) != 1:
            raise ProviderConfigError("Gemini schemas cannot express unions", config_key="response_format")
        merged = {k: v for k, v in schema.items() if k != "anyOf"}
        converted = to_gemini_schema({**variants[0], **merged}, definitions)
        if nullable:
            converted["nullable"] = True
        return converted

    json_type = schema.get("type")
    if json_type not in _SCHEMA_TYPES:
        raise ProviderConfigError(f"Unsupported schema type: {json_type!r}", config_key="response_format")

    result: Dict[str, Any] = {"type": _SCHEMA_TYPES[json_type]}
    if "description" in schema:
        result["description"] = schema["description"]
    if "enum" in schema:
        result["enum"] = [str(v) for v in schema["enum"]]

    if json_type == "array" and "items" in schema:
        result["items"] = to_gemini_schema(schema["items"], definitions)
    elif json_type == "object":
        properties = schema.get("properties", {})
        result["properties"] = {
            name: to_gemini_schema(prop, definitions) for name, prop in properties.items()
        }
        if schema.get("required"):
            result["required"] = list(schema["required"])

    return result


def parse_grounding(response: Any) -> Tuple[List[GroundingSource], List[GroundingSupport]]:
    """Extract grounding sources and supports from the first candidate."""
    candidates = getattr(response, "candidates", None) or []
    metadata = getattr(candidates[0], "grounding_metadata", None) if candidates else None
    if metadata is None:
        return [], []

    sources: List[GroundingSource] = []
    for chunk in getattr(metadata, "grounding_chunks", None) or []:
        retrieved = getattr(chunk, "retrieved_context", None)
        web = getattr(chunk, "web", None)
        if retrieved is not None:
            sources.append(GroundingSource(
                title=getattr(retrieved, "title", None),
                content=getattr(retrieved, "text", None),
                uri=getattr(retrieved, "uri", None),
            ))
        elif web is not None:
            sources.append(GroundingSource(
                title=getattr(web, "title", None),
                uri=getattr(web, "uri", None),
            ))

    supports: List[GroundingSupport] = []
    for support in getattr(metadata, "grounding_supports", None) or []:
        segment = getattr(support, "segment", None)
        supports.append(GroundingSupport(
            segment=GroundingSegment(
                start_index=getattr(segment, "start_index", None) or 0,
                end_index=getattr(segment, "end_index", None) or 0,
                text=getattr(segment, "text", None) or "",
            ),
            grounding_chunk_indices=list(getattr(support, "grounding_chunk_indices", None) or []),
            confidence_scores=list(getattr(support, "confidence_scores", None) or []),
        ))

    return sources, supports


class GeminiProvider(AIProvider):
    """
    Completion provider backed by the Gemini API.

    System messages become the system instruction, assistant turns are sent
    with the ``model`` role. When a datastore is configured the request
    carries a Vertex AI Search retrieval tool and the result includes its
    grounding sources.
    """

    name = "gemini"
    options_type = GeminiOptions

    def __init__(
        self,
        api_key: str,
        client: Optional[genai.Client] = None,
        **option_defaults: Any,
    ):
        super().__init__(api_key, **option_defaults)
        self._client = client or genai.Client(api_key=api_key)

    def build_contents(self, messages: List[Message]) -> Tuple[Optional[str], List[types.Content]]:
        system_parts: List[str] = []
        contents: List[types.Content] = []

        for message in messages:
            if not isinstance(message.content, str):
                continue
            if message.role == "system":
                system_parts.append(message.content)
                continue
            contents.append(types.Content(
                role="model" if message.role == "assistant" else "user",
                parts=[types.Part.from_text(text=message.content)],
            ))

        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    def build_config(self, system_instruction: Optional[str], options: GeminiOptions) -> types.GenerateContentConfig:
        config: Dict[str, Any] = {"temperature": options.temperature}

        if system_instruction:
            config["system_instruction"] = system_instruction
        if options.top_p:
            config["top_p"] = options.top_p
        if options.stop:
            config["stop_sequences"] = options.stop
        if options.response_format:
            config["response_mime_type"] = "application/json"
            config["response_schema"] = to_gemini_schema(options.response_format.json_schema)
        if options.datastore:
            config["tools"] = [
                types.Tool(retrieval=types.Retrieval(
                    vertex_ai_search=types.VertexAISearch(datastore=options.datastore),
                )),
            ]

        return types.GenerateContentConfig(**config)

    async def _complete(self, messages: List[Message], options: GeminiOptions) -> CompletionResult:
        system_instruction, contents = self.build_contents(messages)

        response = await self._client.aio.models.generate_content(
            model=options.model,
            contents=contents,
            config=self.build_config(system_instruction, options),
        )

        text = getattr(response, "text", None) or ""
        data = self._parse_json(text, options.model) if options.response_format else None
        sources, supports = parse_grounding(response)

        return CompletionResult(
            text=text,
            data=data,
            sources=sources,
            grounding_supports=supports,
            model=options.model,
        )
