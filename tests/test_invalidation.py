import re

from campus_cache.invalidation import (
    invalidate_class,
    invalidate_entity,
    invalidate_leaderboard,
    invalidate_matching,
    invalidate_student_rewards,
)
from campus_cache.keys import class_key, leaderboard_key


def test_invalidate_student_rewards_clears_each_sub_namespace(cache):
    for namespace in ("points", "achievements", "level"):
        cache.set(namespace, "student-1", f"{namespace}-1")
        cache.set(namespace, "student-2", f"{namespace}-2")

    removed = invalidate_student_rewards(cache, "student-1")

    assert removed == 3
    for namespace in ("points", "achievements", "level"):
        assert not cache.has(namespace, "student-1")
        assert cache.has(namespace, "student-2")


def test_invalidate_entity_counts_only_existing_entries(cache):
    cache.set("points", "42", 1)

    assert invalidate_entity(cache, 42, ["points", "level"]) == 1


def test_invalidate_leaderboard_drops_every_period_and_page(cache):
    cache.set("leaderboard", leaderboard_key("class", "1", "DAILY", 10, 0), "d0")
    cache.set("leaderboard", leaderboard_key("class", "1", "weekly", 10, 10), "w10")
    cache.set("leaderboard", leaderboard_key("class", "12", "daily", 10, 0), "other-class")
    cache.set("leaderboard", leaderboard_key("subject", "1", "daily", 10, 0), "subject")

    removed = invalidate_leaderboard(cache, "class", "1")

    assert removed == 2
    assert sorted(cache.keys("leaderboard")) == ["class:12:daily:10:0", "subject:1:daily:10:0"]


def test_invalidate_class_spans_class_namespaces(cache):
    cache.set("class-data", class_key("c1", purpose="quiz", status=None), "filtered")
    cache.set("class-data", class_key("c1"), "plain")
    cache.set("class-metrics", class_key("c1"), "metrics")
    cache.set("class-data", class_key("c10"), "other")
    cache.set("points", "c1", "unrelated")

    removed = invalidate_class(cache, "c1")

    assert removed == 3
    assert cache.keys("class-data") == ["c10"]
    assert cache.has("points", "c1")


def test_invalidate_matching_with_compiled_pattern(cache):
    cache.set("topics", "subject-1:page-1", 1)
    cache.set("topics", "subject-2:page-1", 2)
    cache.set("points", "subject-1", 3)

    assert invalidate_matching(cache, re.compile(r"^subject-1"), namespace="topics") == 1
    assert cache.has("points", "subject-1")
    assert invalidate_matching(cache, "subject-") == 2
    assert cache.size() == 0
