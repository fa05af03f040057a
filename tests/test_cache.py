"""Tests for the prompt cache."""
from __future__ import annotations

from orchestra.services.cache import SemanticCache


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_lookup_normalizes_case_and_whitespace() -> None:
    cache = SemanticCache()
    cache.put("  Show SPRINT status ", "Sprint 42 is on track.")

    assert cache.get("show sprint status") == "Sprint 42 is on track."
    assert cache.get("show sprint status please") is None


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache = SemanticCache(ttl_seconds=60, clock=clock)
    cache.put("q", "a")

    clock.now += 59
    assert cache.get("q") == "a"

    clock.now += 1
    assert cache.get("q") is None
    assert len(cache) == 0


def test_put_overwrites_and_refreshes_timestamp() -> None:
    clock = FakeClock()
    cache = SemanticCache(ttl_seconds=10, clock=clock)
    cache.put("q", "old")
    clock.now += 8
    cache.put("Q", "new")
    clock.now += 8

    assert cache.get("q") == "new"
    assert len(cache) == 1

    cache.clear()
    assert cache.get("q") is None
