"""
pytest configuration and shared fixtures for the gateway tests.
"""
import pytest

from gemini_openai.kv import LocalKVStorage

START_MS = 1_750_000_000_000


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, now_ms: int = START_MS):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "kv" / "store.json"


@pytest.fixture
def store(storage_path, clock) -> LocalKVStorage:
    return LocalKVStorage(storage_path, clock=clock)
