"""
Tests for pluck / only / except projections.
"""
from types import SimpleNamespace

from helperkit import array_except, array_only, array_pluck, except_, only, pluck

PEOPLE = [
    {"name": "John", "age": 30, "address": {"city": "NY"}},
    {"name": "Jane", "age": 25, "address": {"city": "LA"}},
]


def test_pluck_values():
    assert array_pluck(PEOPLE, "name") == ["John", "Jane"]


def test_pluck_keyed():
    assert array_pluck(PEOPLE, "age", "name") == {"John": 30, "Jane": 25}


def test_pluck_nested_paths_and_missing_values():
    items = PEOPLE + [{"name": "Ghost"}]
    assert pluck(items, "address.city") == ["NY", "LA", None]
    assert pluck(items, "name", "address.city") == {"NY": "John", "LA": "Jane", "": "Ghost"}


def test_pluck_keeps_duplicates_and_last_key_wins():
    items = [{"k": "a", "v": 1}, {"k": "a", "v": 2}]
    assert pluck(items, "k") == ["a", "a"]
    assert pluck(items, "v", "k") == {"a": 2}


def test_pluck_over_mapping_values_and_records():
    users = {"x": SimpleNamespace(id=1), "y": SimpleNamespace(id=2)}
    assert pluck(users, "id") == [1, 2]


def test_only_and_except():
    record = {"name": "John", "age": 30, "location": "NY"}
    assert array_except(record, ["age", "location"]) == {"name": "John"}
    assert array_only(record, ["name", "location"]) == {"name": "John", "location": "NY"}
    # input is never modified
    assert record == {"name": "John", "age": 30, "location": "NY"}


def test_only_preserves_mapping_order_not_key_order():
    record = {"a": 1, "b": 2, "c": 3}
    assert list(only(record, ["c", "a"])) == ["a", "c"]


def test_single_key_and_unknown_keys():
    record = {"name": "John", "age": 30}
    assert only(record, "name") == {"name": "John"}
    assert except_(record, "age") == {"name": "John"}
    assert only(record, ["missing"]) == {}
    assert except_(record, ["missing"]) == record


def test_only_and_except_match_numeric_keys_like_paths():
    record = {1: "a", "2": "b", "03": "c"}
    assert only(record, ["1", 2]) == {1: "a", "2": "b"}
    assert except_(record, "1") == {"2": "b", "03": "c"}
    assert only(record, [3]) == {}
