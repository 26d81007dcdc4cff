"""
Shared fixtures for the translation pipeline tests.
"""

import pytest

from helpers import ScriptedGenerator, build_srt
from transcreator.config import PipelineConfig


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(openai_api_key="test", max_retries=3, backoff_ms=0)


@pytest.fixture
def make_generator():
    return ScriptedGenerator


@pytest.fixture
def make_srt():
    def _make(n: int, duration: float = 3.0) -> str:
        return build_srt([f"Line number {i}" for i in range(1, n + 1)], duration)

    return _make
