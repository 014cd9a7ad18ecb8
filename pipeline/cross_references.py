"""
SCRIPTORIUM - Cross-Reference Discovery

Asks a completion provider for a verse's cross references.
"""
from __future__ import annotations

from typing import List, Optional

from core.errors import GenerationError
from data.references import parse_reference_list
from observability import get_logger
from providers.base import AIProvider, Message, OptionsT
from providers.prompts import CROSS_REFERENCE_PROMPT

logger = get_logger(__name__)

DEFAULT_MAX_RESULTS = 8


class CrossReferenceFinder:
    """
    Collects LLM-suggested cross references for a verse.

    The answer is split into reference strings as-is; references that do not
    resolve are kept here and dropped when the timeline is built.
    """

    def __init__(self, provider: AIProvider, options: Optional[OptionsT] = None):
        self.provider = provider
        self.options = options

    async def find(self, reference: str, text: str, max_results: int = DEFAULT_MAX_RESULTS) -> List[str]:
        """
        Cross references for ``reference``.

        Raises:
            GenerationError: the provider returned no references.
            ProviderError: the provider call itself failed.
        """
        prompt = self.provider.hydrate_prompt(
            CROSS_REFERENCE_PROMPT,
            {"maxResults": str(max_results), "reference": reference, "text": text},
        )
        result = await self.provider.complete(
            [Message.system(prompt.system_prompt), Message.user(prompt.user_prompt)],
            self.options,
        )

        references = parse_reference_list(result.text)
        if not references:
            raise GenerationError(
                f"No cross references returned for {reference}",
                verse_ref=reference,
            )

        logger.info(
            "Cross references found",
            reference=reference,
            count=len(references),
            provider=self.provider.name,
        )
        return references[:max_results]
