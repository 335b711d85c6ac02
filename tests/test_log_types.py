from logship.core.log_types import LOG_TYPES, LogType, get_log_filter


def test_level_expands_and_merges_with_explicit_types() -> None:
    table = {"a": LogType("A", 1), "b": LogType("B", 2), "c": LogType("C", 3)}

    types = get_log_filter(["a"], 2, table=table)

    assert set(types) == {"a", "b", "c"}
    assert len(types) == 3


def test_duplicates_are_removed() -> None:
    table = {"a": LogType("A", 1), "b": LogType("B", 2)}

    assert get_log_filter(["b", "b", "a"], 2, table=table) == ["b", "a"]


def test_no_level_keeps_explicit_types_only() -> None:
    assert get_log_filter(["s", "f"]) == ["s", "f"]
    assert get_log_filter() == []


def test_default_table_critical_level() -> None:
    types = get_log_filter(log_level=4)

    assert types
    assert all(LOG_TYPES[code].level == 4 for code in types)
