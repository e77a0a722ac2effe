"""
Pytest configuration and fixtures.

Sets up import paths for the test suite and provides shared studio
fixtures: a fixed clock, a seeded random source, an in-memory store,
a fake LLM provider and a sample yoga studio.
"""

import json
import random
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Add tests directory to path for fixtures
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

from core.contracts.studio import Business
from core.infrastructure.state_store import StateStore
from core.llm_client import BaseLLMClient, LLMClient
from pipelines.studio_assistant.directory import BusinessDirectory
from fixtures.sample_studio import sample_business_data


# Wednesday 2025-09-10 14:00 UTC == 10:00 in New York (EDT)
FIXED_NOW = datetime(2025, 9, 10, 14, 0, tzinfo=timezone.utc)


class FakeLLMProvider(BaseLLMClient):
    """
    In-memory LLM provider.

    Each call pops the next scripted reply. A reply that is an Exception
    is raised instead of returned; a dict is returned as JSON text.
    """

    def __init__(self, replies: Optional[List[Union[str, Dict[str, Any], Exception]]] = None) -> None:
        self.replies = list(replies or [])
        self.calls: List[Dict[str, Any]] = []

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 512,
        system_prompt: Optional[str] = None,
        json_mode: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        self.calls.append({
            "prompt": prompt,
            "system_prompt": system_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "json_mode": json_mode,
            "metadata": metadata,
        })
        if not self.replies:
            raise RuntimeError("FakeLLMProvider has no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            return json.dumps(reply)
        return reply


@pytest.fixture
def now():
    """Fixed reference instant."""
    return FIXED_NOW


@pytest.fixture
def rng():
    """Seeded random source for reproducible schedules."""
    return random.Random(42)


@pytest.fixture
def store():
    """Fresh in-memory state store."""
    return StateStore()


@pytest.fixture
def directory(store, rng):
    """Business directory with a fixed clock."""
    return BusinessDirectory(store, clock=lambda: FIXED_NOW, schedule_rng=rng)


@pytest.fixture
def yoga_business():
    """Flow & Glow Yoga (America/New_York) with two scheduled services."""
    return Business.model_validate(sample_business_data())


@pytest.fixture
def stored_business(directory, yoga_business):
    """The sample business, persisted in the directory."""
    directory.add_business(yoga_business)
    return yoga_business


@pytest.fixture
def fake_provider():
    """Unscripted fake provider; tests append replies."""
    return FakeLLMProvider()


@pytest.fixture
def llm_client(fake_provider):
    """LLMClient facade backed by the fake provider."""
    return LLMClient(provider=fake_provider)
