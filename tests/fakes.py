"""
Fake SDK clients standing in for ``openai.AsyncOpenAI`` and ``genai.Client``.

Only the attribute paths the providers touch are implemented. Every request
is recorded so tests can inspect what would have been sent.
"""
from types import SimpleNamespace
from typing import Any, Dict, List, Optional


class FakeChatCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions``."""

    def __init__(self, content: str, model: str = "gpt-4o-mini"):
        self.content = content
        self.model = model
        self.calls: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], model=self.model)


class FakeOpenAIClient:
    def __init__(self, content: str):
        self.chat = SimpleNamespace(completions=FakeChatCompletions(content))

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.chat.completions.calls


class FakeGeminiModels:
    """Stands in for ``genai.Client().aio.models``."""

    def __init__(self, text: str, grounding_metadata: Any = None):
        self.text = text
        self.grounding_metadata = grounding_metadata
        self.calls: List[Dict[str, Any]] = []

    async def generate_content(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        candidate = SimpleNamespace(grounding_metadata=self.grounding_metadata)
        return SimpleNamespace(text=self.text, candidates=[candidate])


class FakeGeminiClient:
    def __init__(self, text: str, grounding_metadata: Any = None):
        self.aio = SimpleNamespace(models=FakeGeminiModels(text, grounding_metadata))

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.aio.models.calls
