import logging

import pytest

from campus_cache.procedures import HOUR, ProcedureCache, cached


@pytest.mark.asyncio
async def test_known_category_uses_preset_namespace_and_ttl(cache, clock):
    procedures = ProcedureCache(cache)
    calls = 0

    async def fetch_metrics():
        nonlocal calls
        calls += 1
        return {"students": 30}

    assert await procedures.cache_class_metrics("c1", fetch_metrics) == {"students": 30}
    assert cache.get("class-metrics", "c1") == {"students": 30}

    clock.advance(119)
    await procedures.cache_class_metrics("c1", fetch_metrics)
    assert calls == 1

    clock.advance(1)
    await procedures.cache_class_metrics("c1", fetch_metrics)
    assert calls == 2


@pytest.mark.asyncio
async def test_unknown_category_bypasses_cache(cache, caplog):
    procedures = ProcedureCache(cache)
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        return calls

    with caplog.at_level(logging.WARNING):
        assert await procedures.call("no-such-category", "k", fetch) == 1
        assert await procedures.call("no-such-category", "k", fetch) == 2

    assert cache.size() == 0
    assert "bypassing cache" in caplog.text


@pytest.mark.asyncio
async def test_class_by_id_keys_include_filters(cache):
    procedures = ProcedureCache(cache)

    await procedures.cache_class_by_id("c1", lambda: "all", purpose=None)
    await procedures.cache_class_by_id("c1", lambda: "quiz", purpose="quiz")

    assert cache.get("class-data", "c1:purpose=all") == "all"
    assert cache.get("class-data", "c1:purpose=quiz") == "quiz"


@pytest.mark.asyncio
async def test_all_time_leaderboard_uses_long_ttl(cache, clock):
    procedures = ProcedureCache(cache)

    await procedures.cache_leaderboard("class", "c1", "ALL_TIME", 10, 0, lambda: ["all"])
    await procedures.cache_leaderboard("class", "c1", "daily", 10, 0, lambda: ["daily"])

    clock.advance(HOUR)
    assert cache.get("leaderboard", "class:c1:all_time:10:0") == ["all"]
    assert cache.get("leaderboard", "class:c1:daily:10:0") is None

    clock.advance(5 * HOUR)
    assert cache.get("leaderboard", "class:c1:all_time:10:0") is None


@pytest.mark.asyncio
async def test_cached_decorator_memoizes_by_arguments(cache):
    calls = []

    @cached(cache, "topics", ttl=60)
    async def list_topics(subject_id, page=1):
        calls.append((subject_id, page))
        return [f"{subject_id}-topic-{page}"]

    assert await list_topics("math") == ["math-topic-1"]
    assert await list_topics("math") == ["math-topic-1"]
    assert await list_topics("math", page=2) == ["math-topic-2"]

    assert calls == [("math", 1), ("math", 2)]
    assert list_topics.__name__ == "list_topics"


@pytest.mark.asyncio
async def test_cached_decorator_with_explicit_key(cache):
    class TopicService:
        def __init__(self):
            self.calls = 0

        @cached(cache, "topics", key=lambda self, subject_id: f"subject:{subject_id}")
        async def topics(self, subject_id):
            self.calls += 1
            return [subject_id]

    first, second = TopicService(), TopicService()
    await first.topics("math")
    await second.topics("math")

    assert first.calls + second.calls == 1
    assert cache.get("topics", "subject:math") == ["math"]
