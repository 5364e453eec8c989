from datetime import date

from campus_cache.keys import class_key, leaderboard_key, namespaced, query_key


def test_query_key_ignores_parameter_order():
    assert query_key("student_summary", {"a": 1, "b": 2}) == query_key(
        "student_summary", {"b": 2, "a": 1}
    )


def test_query_key_distinguishes_values():
    assert query_key("p", {"page": 1}) != query_key("p", {"page": 2})
    assert query_key("p", {"page": 1}) != query_key("q", {"page": 1})


def test_query_key_handles_non_json_values():
    assert query_key("p", {"day": date(2024, 1, 2)}) == 'p_{"day":"2024-01-02"}'


def test_leaderboard_key_normalizes_period_case():
    assert leaderboard_key("class", "c1", "ALL_TIME", 10, 20) == "class:c1:all_time:10:20"


def test_class_key_renders_unset_filters_as_all():
    assert class_key("c1", status=None, purpose="quiz") == "c1:purpose=quiz:status=all"
    assert class_key("c1") == "c1"


def test_namespaced_joins_with_separator():
    assert namespaced("points", "student-1") == "points:student-1"
