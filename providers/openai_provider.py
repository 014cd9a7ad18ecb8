"""
SCRIPTORIUM - OpenAI Provider

Chat completions through the official ``openai`` SDK.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from openai import APITimeoutError, AsyncOpenAI

from providers.base import AIProvider, CompletionResult, Message, OpenAIOptions


class OpenAIProvider(AIProvider):
    """
    Completion provider backed by the OpenAI chat completions API.

    Messages whose content is not a string are dropped before sending.
    Optional sampling parameters are only sent when set. Responses are never
    stored on the vendor side unless ``store`` is enabled.
    """

    name = "openai"
    options_type = OpenAIOptions
    timeout_errors = (APITimeoutError,)

    def __init__(
        self,
        api_key: str,
        client: Optional[AsyncOpenAI] = None,
        **option_defaults: Any,
    ):
        super().__init__(api_key, **option_defaults)
        self._client = client or AsyncOpenAI(api_key=api_key)

    def build_request(self, messages: List[Message], options: OpenAIOptions) -> Dict[str, Any]:
        """Translate messages and options into chat.completions.create kwargs."""
        request: Dict[str, Any] = {
            "model": options.model,
            "messages": [
                {"role": m.role, "content": m.content}
                for m in messages
                if isinstance(m.content, str)
            ],
            "temperature": options.temperature,
            "store": options.store,
        }

        # Only pass what was actually configured
        if options.max_tokens:
            request["max_tokens"] = options.max_tokens
        if options.top_p:
            request["top_p"] = options.top_p
        if options.frequency_penalty:
            request["frequency_penalty"] = options.frequency_penalty
        if options.presence_penalty:
            request["presence_penalty"] = options.presence_penalty
        if options.stop:
            request["stop"] = options.stop

        if options.response_format:
            request["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": options.response_format.name,
                    "schema": options.response_format.json_schema,
                    "strict": options.response_format.strict,
                },
            }

        return request

    async def _complete(self, messages: List[Message], options: OpenAIOptions) -> CompletionResult:
        response = await self._client.chat.completions.create(**self.build_request(messages, options))

        text = response.choices[0].message.content or ""
        model = getattr(response, "model", None) or options.model

        data = None
        if options.response_format:
            data = self._parse_json(text, model)

        return CompletionResult(text=text, data=data, model=model)
