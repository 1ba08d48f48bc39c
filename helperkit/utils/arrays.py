"""
Projection and filtering helpers for lists of records and flat mappings.
"""
from collections.abc import Iterable, Mapping
from typing import Any

from helperkit.utils.dict_path import getter, normalize_key


def _as_items(collection: Any) -> Iterable:
    if isinstance(collection, Mapping):
        return collection.values()
    return collection


def _as_keys(keys: Any) -> set:
    """A single key or an iterable of keys -> set of normalised keys."""
    if isinstance(keys, (str, bytes, int)) or keys is None:
        keys = [keys]
    return {normalize_key(k) for k in keys}


def array_pluck(collection: Any, value_path: Any, key_path: Any = None) -> list | dict:
    """
    Pluck a value (by dot path) out of every item in a collection.
    Without key_path returns a list; with key_path returns a dict keyed by the
    value found at key_path (later duplicates win). Items missing the key are
    collected under "".
    """
    get_value = getter(value_path)
    if key_path is None:
        return [get_value(item) for item in _as_items(collection)]
    get_key = getter(key_path, "")
    results = {}
    for item in _as_items(collection):
        key = get_key(item)
        results["" if key is None else key] = get_value(item)
    return results


def array_only(mapping: Mapping, keys: Any) -> dict:
    """Return a new dict with only the given top-level keys, in mapping order."""
    wanted = _as_keys(keys)
    return {k: v for k, v in mapping.items() if normalize_key(k) in wanted}


def array_except(mapping: Mapping, keys: Any) -> dict:
    """Return a new dict without the given top-level keys."""
    unwanted = _as_keys(keys)
    return {k: v for k, v in mapping.items() if normalize_key(k) not in unwanted}


pluck = array_pluck
only = array_only
except_ = array_except
