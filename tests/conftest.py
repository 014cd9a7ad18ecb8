"""
SCRIPTORIUM - Test Configuration

Pytest fixtures and configuration for all tests.
"""
import json
from typing import Any, Dict, List

import pytest

from tests.fakes import FakeGeminiClient, FakeOpenAIClient


@pytest.fixture
def sample_verse_ref() -> str:
    """Sample verse reference for testing."""
    return "John 3:16"


@pytest.fixture
def sample_verse_text() -> str:
    """Sample verse text for testing."""
    return "For God so loved the world, that he gave his only begotten Son."


@pytest.fixture
def sample_greek_text() -> str:
    """Sample Greek text for testing."""
    return "οὕτως γὰρ ἠγάπησεν ὁ θεὸς τὸν κόσμον"


@pytest.fixture
def sample_cross_references() -> List[Dict[str, Any]]:
    """Cross references for John 3:16 as delivered by the study data source."""
    return [
        {"reference": "Isaiah 53:5", "text": "But he was wounded for our transgressions", "connection": "prophecy"},
        {"reference": "Genesis 1:1", "text": "In the beginning God created", "period": "creation"},
        {"reference": "Genesis 3:15", "text": "I will put enmity", "connection": "protoevangelium"},
    ]


@pytest.fixture
def study_verses() -> List[str]:
    """Verses of a short study, in study order."""
    return ["Gen 1:1", "Gen 1:2", "Gen 1:3"]


@pytest.fixture
def fake_openai_client() -> FakeOpenAIClient:
    """OpenAI client answering with a markdown commentary payload."""
    return FakeOpenAIClient(json.dumps({"markdown": "## Meaning\nGod's love."}))


@pytest.fixture
def fake_gemini_client() -> FakeGeminiClient:
    """Gemini client answering with a markdown commentary payload."""
    return FakeGeminiClient(json.dumps({"markdown": "## Meaning\nGod's love."}))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "property: marks property-based tests using Hypothesis")
