import pathlib
import sys

import pytest

# Ensure repo root on sys.path for direct module imports when running tests locally.
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from campus_cache.cache import NamespacedCache
from campus_cache.models import CachePolicy


class FakeClock:
    """Manually advanced clock so expiry tests never sleep."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_cache(clock):
    def _make(name="test", **policy):
        return NamespacedCache(name, CachePolicy(**policy), clock=clock)

    return _make


@pytest.fixture
def cache(make_cache):
    return make_cache(max_entries=100, default_ttl_seconds=60)
