"""
Tests for LLM cross-reference discovery.
"""
import pytest


class TestCrossReferenceFinder:
    """Tests for CrossReferenceFinder."""

    @pytest.mark.asyncio
    async def test_find(self, sample_verse_ref, sample_verse_text):
        from pipeline.cross_references import CrossReferenceFinder
        from providers.openai_provider import OpenAIProvider
        from tests.fakes import FakeOpenAIClient

        client = FakeOpenAIClient("Romans 5:8; 1 John 4:9,10; NotABook 1:1")
        finder = CrossReferenceFinder(OpenAIProvider("sk-test", client=client))

        references = await finder.find(sample_verse_ref, sample_verse_text, max_results=5)

        # Unresolvable entries are left for the timeline to drop
        assert references == ["Romans 5:8", "1 John 4:9,10", "NotABook 1:1"]

        system, user = client.calls[0]["messages"]
        assert "at most 5 cross reference" in system["content"]
        assert user["content"].startswith("<verse-reference>John 3:16</verse-reference>")

    @pytest.mark.asyncio
    async def test_result_is_capped(self):
        from pipeline.cross_references import CrossReferenceFinder
        from providers.openai_provider import OpenAIProvider
        from tests.fakes import FakeOpenAIClient

        answer = "; ".join(f"Psalms {n}:1" for n in range(1, 12))
        finder = CrossReferenceFinder(OpenAIProvider("sk-test", client=FakeOpenAIClient(answer)))

        assert len(await finder.find("Psalms 1:1", "Blessed is the man")) == 8

    @pytest.mark.asyncio
    async def test_empty_answer(self):
        from core.errors import GenerationError
        from pipeline.cross_references import CrossReferenceFinder
        from providers.openai_provider import OpenAIProvider
        from tests.fakes import FakeOpenAIClient

        finder = CrossReferenceFinder(OpenAIProvider("sk-test", client=FakeOpenAIClient("## none")))

        with pytest.raises(GenerationError):
            await finder.find("John 3:16", "For God so loved")

    @pytest.mark.asyncio
    async def test_feeds_timeline(self):
        from pipeline.cross_references import CrossReferenceFinder
        from pipeline.timeline import build_timeline
        from providers.gemini_provider import GeminiProvider
        from tests.fakes import FakeGeminiClient

        client = FakeGeminiClient("Genesis 3:15; Isaiah 53:5; Genesis 22:8; NotABook 1:1")
        references = await CrossReferenceFinder(GeminiProvider("key", client=client)).find("John 3:16", "For God")

        timeline = build_timeline("John 3:16", references)
        assert [c.book for c in timeline.clusters] == ["Genesis", "Isaiah"]
        assert len(timeline.clusters[0]) == 2
