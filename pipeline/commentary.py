"""
SCRIPTORIUM - Sequential Commentary

Generates commentary for the verses of a study one at a time, feeding each
request the commentaries already produced for the verses that precede it in
the study. Later commentary can then build on earlier commentary instead of
repeating it.

Components:
- CommentaryAccumulator: selects and orders the prior commentaries, calls the
  generator, validates and stamps the result
- CommentaryStore: one Commentary per verse reference
- CommentarySession: a study's verses, its store and a single in-flight guard
- ProviderCommentaryGenerator: the generate callback backed by an AIProvider
"""
from __future__ import annotations

import time
from collections import OrderedDict
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
)

from opentelemetry.trace import SpanKind
from pydantic import ValidationError

from core.errors import (
    CommentaryBusyError,
    ErrorContext,
    GenerationError,
    ScriptoriumValidationError,
)
from data.schemas import (
    Commentary,
    CrossReference,
    MarkdownCommentary,
    OriginalText,
    parse_commentary_payload,
)
from observability import CommentaryLogger, LogContext, get_logger, get_tracer
from providers.base import AIProvider, JsonSchemaFormat, Message, OptionsT
from providers.prompts import COMMENTARY_SYSTEM_PROMPT, build_commentary_prompt

logger = get_logger(__name__)

# (verse_ref, prior commentaries in generation order) -> raw payload
GenerateFn = Callable[[str, List[Commentary]], Awaitable[Any]]


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


# =============================================================================
# ACCUMULATOR
# =============================================================================

class CommentaryAccumulator:
    """
    Builds one Commentary from the commentaries that precede it in a study.

    ``existing`` is read once, when ``generate_for`` is called. Nothing here
    serializes calls: two generations started concurrently each see the
    snapshot taken at their own start and neither sees the other's result.
    Callers wanting strict accumulation must await each call before starting
    the next (CommentarySession does this for one session).
    """

    def __init__(self, clock: Callable[[], int] = now_ms):
        self._clock = clock
        self._tracer = get_tracer("scriptorium.commentary")
        self._log = CommentaryLogger()

    @staticmethod
    def previous_commentaries(
        verse_ref: str,
        all_verses: Sequence[str],
        existing: Iterable[Commentary],
    ) -> List[Commentary]:
        """
        Commentaries for verses strictly before ``verse_ref`` in ``all_verses``.

        Ordered by timestamp ascending. A verse that is not part of the study
        has no predecessors.
        """
        try:
            index = list(all_verses).index(verse_ref)
        except ValueError:
            return []

        earlier = set(all_verses[:index])
        selected = [c for c in existing if c.verse_ref in earlier]
        return sorted(selected, key=lambda c: c.timestamp)

    async def generate_for(
        self,
        verse_ref: str,
        all_verses: Sequence[str],
        existing: Iterable[Commentary],
        generate: GenerateFn,
    ) -> Commentary:
        """
        Generate commentary for ``verse_ref``.

        Args:
            verse_ref: Verse to comment on.
            all_verses: The study's verses in study order.
            existing: Commentaries generated so far.
            generate: Callback producing the payload.

        Returns:
            A Commentary stamped with the completion time.

        Raises:
            GenerationError: the callback failed or returned an invalid payload.
                Nothing is recorded and nothing is retried.
        """
        snapshot = list(existing)
        previous = self.previous_commentaries(verse_ref, all_verses, snapshot)

        with self._tracer.start_as_current_span(
            "commentary.generate",
            kind=SpanKind.INTERNAL,
        ) as span:
            span.set_attribute("verse.ref", verse_ref)
            span.set_attribute("commentary.context_count", len(previous))

            self._log.start_generation(verse_ref, len(previous))
            start_time = time.perf_counter()

            try:
                async with LogContext(verse_ref=verse_ref):
                    raw = await generate(verse_ref, previous)
            except Exception as e:
                self._log.generation_error(verse_ref, str(e))
                raise GenerationError(
                    f"Commentary generation failed for {verse_ref}",
                    verse_ref=verse_ref,
                    cause=e,
                    context=ErrorContext.from_current_span(
                        operation="generate_for",
                        component="pipeline.commentary",
                        verse_ref=verse_ref,
                    ),
                ) from e

            try:
                payload = parse_commentary_payload(raw)
            except ValidationError as e:
                invalid = ScriptoriumValidationError(
                    "Generated commentary has neither a markdown nor a sections shape",
                    field_name="commentary",
                    actual_value=raw,
                    cause=e,
                )
                self._log.generation_error(verse_ref, invalid.message)
                raise GenerationError(
                    f"Invalid commentary payload for {verse_ref}",
                    verse_ref=verse_ref,
                    cause=invalid,
                ) from invalid

            self._log.end_generation(verse_ref, (time.perf_counter() - start_time) * 1000)
            return Commentary(verse_ref=verse_ref, commentary=payload, timestamp=self._clock())


# =============================================================================
# STORE
# =============================================================================

class CommentaryStore:
    """Keyed collection holding at most one Commentary per verse reference."""

    def __init__(self, commentaries: Iterable[Commentary] = ()):
        self._items: "OrderedDict[str, Commentary]" = OrderedDict()
        for commentary in commentaries:
            self.upsert(commentary)

    def upsert(self, commentary: Commentary) -> None:
        """Insert or replace; a replaced entry moves to the end."""
        self._items.pop(commentary.verse_ref, None)
        self._items[commentary.verse_ref] = commentary

    def discard(self, verse_ref: str) -> Optional[Commentary]:
        return self._items.pop(verse_ref, None)

    def get(self, verse_ref: str) -> Optional[Commentary]:
        return self._items.get(verse_ref)

    def values(self) -> List[Commentary]:
        return list(self._items.values())

    def reset(self, commentaries: Iterable[Commentary]) -> None:
        self._items.clear()
        for commentary in commentaries:
            self.upsert(commentary)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, verse_ref: object) -> bool:
        return verse_ref in self._items

    def __iter__(self) -> Iterator[Commentary]:
        return iter(self.values())

    def to_list(self) -> List[Dict[str, Any]]:
        """Persistable ``[{verseRef, commentary, timestamp}]``."""
        return [c.to_dict() for c in self._items.values()]

    @classmethod
    def from_list(cls, data: Iterable[Dict[str, Any]]) -> "CommentaryStore":
        return cls(Commentary.from_dict(item) for item in data)


# =============================================================================
# SESSION
# =============================================================================

class CommentarySession:
    """
    A study's commentary state.

    Only one generation may be in flight per session; a second request while
    one is running is rejected with CommentaryBusyError rather than queued.
    """

    def __init__(
        self,
        verses: Sequence[str],
        generate: GenerateFn,
        store: Optional[CommentaryStore] = None,
        accumulator: Optional[CommentaryAccumulator] = None,
    ):
        self.verses = list(verses)
        self.store = store if store is not None else CommentaryStore()
        self._generate = generate
        self._accumulator = accumulator or CommentaryAccumulator()
        self._in_flight: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self._in_flight is not None

    @property
    def in_flight(self) -> Optional[str]:
        return self._in_flight

    def _acquire(self, verse_ref: str) -> None:
        if self._in_flight is not None:
            raise CommentaryBusyError(
                f"Commentary for {self._in_flight} is still being generated",
                verse_ref=verse_ref,
                in_flight=self._in_flight,
            )
        self._in_flight = verse_ref

    async def generate(self, verse_ref: str) -> Commentary:
        """Generate commentary for ``verse_ref`` and store it, replacing any earlier one."""
        self._acquire(verse_ref)
        try:
            commentary = await self._accumulator.generate_for(
                verse_ref, self.verses, self.store.values(), self._generate
            )
            self.store.upsert(commentary)
            return commentary
        finally:
            self._in_flight = None

    async def regenerate(self, verse_ref: str) -> Commentary:
        """
        Drop the stored commentary for ``verse_ref`` and generate a new one.

        If generation fails the store is put back exactly as it was.
        """
        self._acquire(verse_ref)
        before = self.store.values()
        self.store.discard(verse_ref)
        try:
            commentary = await self._accumulator.generate_for(
                verse_ref, self.verses, self.store.values(), self._generate
            )
        except Exception:
            self.store.reset(before)
            raise
        finally:
            self._in_flight = None

        self.store.upsert(commentary)
        return commentary

    async def generate_all(self) -> List[Commentary]:
        """Generate every verse of the study in order, each building on the last."""
        results = []
        for verse_ref in self.verses:
            results.append(await self.generate(verse_ref))
        return results


# =============================================================================
# PROVIDER-BACKED GENERATOR
# =============================================================================

class ProviderCommentaryGenerator:
    """
    Generate callback that asks a completion provider for commentary.

    Requests structured output shaped like MarkdownCommentary and returns the
    provider's parsed payload for the accumulator to validate.
    """

    def __init__(
        self,
        provider: AIProvider,
        verse_texts: Mapping[str, str],
        cross_references: Optional[Mapping[str, Sequence[CrossReference]]] = None,
        original_texts: Optional[Mapping[str, OriginalText]] = None,
        original_query: Optional[str] = None,
        options: Optional[OptionsT] = None,
    ):
        self.provider = provider
        self.verse_texts = verse_texts
        self.cross_references = cross_references or {}
        self.original_texts = dict(original_texts or {})
        self.original_query = original_query
        self.options = options or provider.default_options(
            response_format=JsonSchemaFormat.from_model(MarkdownCommentary, name="commentary"),
        )

    def build_messages(self, verse_ref: str, previous: Sequence[Commentary]) -> List[Message]:
        if verse_ref not in self.verse_texts:
            raise GenerationError(f"No verse text available for {verse_ref}", verse_ref=verse_ref)

        prompt = build_commentary_prompt(
            verse_ref,
            self.verse_texts[verse_ref],
            original_text=self.original_texts.get(verse_ref),
            cross_references=self.cross_references.get(verse_ref, ()),
            previous_commentaries=previous,
            previous_original_texts=self.original_texts,
            original_query=self.original_query,
        )
        return [Message.system(COMMENTARY_SYSTEM_PROMPT), Message.user(prompt)]

    async def __call__(self, verse_ref: str, previous: List[Commentary]) -> Any:
        messages = self.build_messages(verse_ref, previous)
        logger.debug(
            "Requesting commentary",
            verse_ref=verse_ref,
            provider=self.provider.name,
            previous=len(previous),
        )
        result = await self.provider.complete(messages, self.options)
        return result.payload
