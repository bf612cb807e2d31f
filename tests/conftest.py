"""
Shared fixtures for prompt-config tests.
"""

import pytest

from prompt_config.common.state import MemoryStore
from prompt_config.fetcher.result import FetchResult


class FakeClock:
    """Mutable epoch-millisecond clock."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeSource:
    """Config source returning queued results and counting calls."""

    def __init__(self, *results: FetchResult):
        self.results = list(results)
        self.calls = 0
        self.closed = False

    async def fetch(self) -> FetchResult:
        self.calls += 1
        if not self.results:
            return FetchResult.failure("transport", "network unreachable")
        return self.results.pop(0)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep host settings files and env out of the tests."""
    for name in (
        "PROMPT_CONFIG_FILE",
        "PROMPT_CONFIG_URL",
        "PROMPT_CONFIG_STATE_FILE",
        "PROMPT_CONFIG_FRESHNESS_MS",
        "PROMPT_CONFIG_TIMEOUT_S",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()
