"""
Helpers to navigate and manipulate nested containers via "dot paths".

A container tree may mix mappings, lists, key-indexable objects and plain
records (objects with attributes). Resolution is structural: the shape of each
node decides how the next segment is looked up.

    data_get({"db": {"host": "x"}}, "db.host")        -> "x"
    data_get(tree, "db.port", lambda: expensive())    -> default is lazy
    data_set(tree, "a.b.c", 1)                        -> creates "a" and "b"
"""
from collections.abc import Mapping, MutableMapping, MutableSequence
from enum import Enum
from typing import Any, Callable

_MISSING = object()


class PathError(ValueError):
    """Raised when a path argument has an unsupported type."""


class NodeShape(str, Enum):
    """How a node in a container tree is traversed."""
    MAP = "map"
    SEQUENCE = "sequence"
    INDEXABLE = "indexable"
    RECORD = "record"
    LEAF = "leaf"


_LEAF_TYPES = (str, bytes, bytearray, int, float, complex, bool, type(None))


def classify(node: Any) -> NodeShape:
    """Decide which traversal rules apply to a node."""
    if isinstance(node, _LEAF_TYPES):
        return NodeShape.LEAF
    if isinstance(node, Mapping):
        return NodeShape.MAP
    if isinstance(node, (list, tuple)):
        return NodeShape.SEQUENCE
    if hasattr(node, "__getitem__") and hasattr(node, "__contains__"):
        return NodeShape.INDEXABLE
    if hasattr(node, "__dict__") or hasattr(node, "__slots__"):
        return NodeShape.RECORD
    return NodeShape.LEAF


def value(v: Any) -> Any:
    """Return v, calling it first if it is a zero-argument callable."""
    return v() if callable(v) else v


def split_path(path: Any) -> list | None:
    """
    Normalise a path into a list of segments.
    None stays None (the whole tree). Strings split on '.' and keep empty
    segments, so "a..b" -> ["a", "", "b"].
    """
    if path is None:
        return None
    if isinstance(path, str):
        return path.split(".")
    if isinstance(path, int) and not isinstance(path, bool):
        return [path]
    if isinstance(path, (list, tuple)):
        for segment in path:
            if isinstance(segment, bool) or not isinstance(segment, (str, int)):
                raise PathError(
                    f"Path segments must be str or int, got {type(segment).__name__}"
                )
        return list(path)
    raise PathError(f"Expected str, list of segments or None as path, got {type(path).__name__}")


def normalize_key(segment: Any) -> Any:
    """
    Canonical form of a key: ints and canonical decimal strings ("7", "-3")
    become ints, everything else is returned unchanged. "07", "-0" and "+1"
    stay strings.
    """
    if isinstance(segment, int):
        return segment
    if not isinstance(segment, str):
        return segment
    digits = segment[1:] if segment.startswith("-") else segment
    if not digits.isdecimal():
        return segment
    try:
        number = int(segment)
    except ValueError:
        # past the interpreter's int string conversion limit
        return segment
    return number if str(number) == segment else segment


def _as_index(segment: Any) -> int | None:
    """Interpret a segment as a list index, or None if it isn't one."""
    index = normalize_key(segment)
    if isinstance(index, int) and index >= 0:
        return index
    return None


def _map_key(node: Mapping, segment: Any) -> Any:
    """
    Find the key a segment refers to in a mapping, or _MISSING.
    Canonical numeric strings also match int keys (and ints match their
    string form).
    """
    if segment in node:
        return segment
    key = normalize_key(segment)
    if isinstance(segment, str):
        if key is not segment and key in node:
            return key
    elif isinstance(segment, int) and str(segment) in node:
        return str(segment)
    return _MISSING


def _record_state(node: Any) -> dict:
    """
    Instance fields of a record: `vars()`, populated `__slots__` and pydantic
    extras. Methods, properties and class attributes are not fields.
    """
    state = dict(getattr(node, "__dict__", {}))
    for cls in type(node).__mro__:
        slots = getattr(cls, "__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name.startswith("__") or name in state:
                continue
            try:
                state[name] = getattr(node, name)
            except AttributeError:
                pass
    extra = getattr(node, "__pydantic_extra__", None)
    if isinstance(extra, dict):
        state.update(extra)
    return state


def _lookup(node: Any, segment: Any) -> Any:
    """Descend one level, returning _MISSING when the segment doesn't resolve."""
    match classify(node):
        case NodeShape.MAP:
            key = _map_key(node, segment)
            return _MISSING if key is _MISSING else node[key]
        case NodeShape.SEQUENCE:
            index = _as_index(segment)
            if index is None or index >= len(node):
                return _MISSING
            return node[index]
        case NodeShape.INDEXABLE:
            try:
                if segment not in node:
                    return _MISSING
                return node[segment]
            except (KeyError, IndexError, TypeError):
                return _MISSING
        case NodeShape.RECORD:
            return _record_state(node).get(str(segment), _MISSING)
        case _:
            return _MISSING


def data_get(target: Any, path: Any, default: Any = None) -> Any:
    """
    Get a value from a nested container via a dot-separated path.
    Missing segments and wrong-shaped nodes resolve to `default`; a callable
    default is only called when resolution fails.
    """
    segments = split_path(path)
    if segments is None:
        return target
    current = target
    for segment in segments:
        current = _lookup(current, segment)
        if current is _MISSING:
            return value(default)
    return current


def data_has(target: Any, path: Any) -> bool:
    """Check whether a path resolves inside target."""
    return data_get(target, path, _MISSING) is not _MISSING


# --- Mutation ---

def _is_writable_indexable(node: Any) -> bool:
    return hasattr(node, "__setitem__")


def _set_in_map(node: MutableMapping, segment, rest, new_value, overwrite) -> MutableMapping:
    key = _map_key(node, segment)
    if rest:
        child = {} if key is _MISSING else node[key]
        node[segment if key is _MISSING else key] = _set(child, rest, new_value, overwrite)
    elif overwrite or key is _MISSING:
        node[segment if key is _MISSING else key] = new_value
    return node


def _set_in_list(node: MutableSequence, segment, rest, new_value, overwrite) -> Any:
    index = _as_index(segment)
    if index is None or index > len(node):
        # Not a list position (or one past a gap): keep the items, keyed by
        # position, in a dict
        return _set_in_map(dict(enumerate(node)), normalize_key(segment), rest, new_value, overwrite)
    exists = index < len(node)
    if not exists:
        node.append(None)
    if rest:
        child = node[index] if exists else {}
        node[index] = _set(child, rest, new_value, overwrite)
    elif overwrite or not exists:
        node[index] = new_value
    return node


def _set_in_indexable(node: Any, segment, rest, new_value, overwrite) -> Any:
    exists = segment in node
    if rest:
        child = node[segment] if exists else {}
        node[segment] = _set(child, rest, new_value, overwrite)
    elif overwrite or not exists:
        node[segment] = new_value
    return node


# setattr failures: frozen dataclasses, slots, pydantic models without the field
_SETATTR_ERRORS = (AttributeError, TypeError, ValueError)


def _set_in_record(node: Any, segment, rest, new_value, overwrite) -> Any:
    name = str(segment)
    current = _record_state(node).get(name, _MISSING)
    if rest:
        child = {} if current is _MISSING else current
        updated = _set(child, rest, new_value, overwrite)
        if updated is current:
            return node
        new_field = updated
    elif overwrite or current is _MISSING:
        new_field = new_value
    else:
        return node
    try:
        setattr(node, name, new_field)
    except _SETATTR_ERRORS:
        # A record that can't take the field is replaced like a leaf
        return _set_in_map({}, segment, rest, new_value, overwrite)
    return node


def _set(node: Any, segments: list, new_value: Any, overwrite: bool) -> Any:
    """
    Write new_value at segments below node and return the node that should
    occupy this position afterwards (node itself, or its replacement).
    """
    if not segments:
        return new_value
    segment, rest = segments[0], segments[1:]
    match classify(node):
        case NodeShape.MAP if isinstance(node, MutableMapping):
            return _set_in_map(node, segment, rest, new_value, overwrite)
        case NodeShape.SEQUENCE if isinstance(node, MutableSequence):
            return _set_in_list(node, segment, rest, new_value, overwrite)
        case NodeShape.INDEXABLE if _is_writable_indexable(node):
            return _set_in_indexable(node, segment, rest, new_value, overwrite)
        case NodeShape.RECORD:
            return _set_in_record(node, segment, rest, new_value, overwrite)
        case _:
            # Writing through a leaf (or read-only container) discards it
            return _set_in_map({}, segment, rest, new_value, overwrite)


def data_set(target: Any, path: Any, new_value: Any, overwrite: bool = True) -> Any:
    """
    Set a value in a nested container via a dot-separated path.

    Containers are mutated in place and missing intermediate levels are
    created as dicts. A leaf found along the path is replaced by a dict.
    With overwrite=False an existing terminal value is left alone.

    Returns the root. Use the return value when the root itself may be
    replaced (path is None or empty, or target is not a container).
    """
    segments = split_path(path)
    if segments is None:
        return new_value
    return _set(target, segments, new_value, overwrite)


def data_forget(target: Any, path: Any) -> bool:
    """Delete a value via a dot-separated path. Returns True if something was removed."""
    segments = split_path(path)
    if not segments:
        return False
    parent = data_get(target, segments[:-1], _MISSING)
    last = segments[-1]
    match classify(parent):
        case NodeShape.MAP if isinstance(parent, MutableMapping):
            key = _map_key(parent, last)
            if key is _MISSING:
                return False
            del parent[key]
            return True
        case NodeShape.SEQUENCE if isinstance(parent, MutableSequence):
            index = _as_index(last)
            if index is None or index >= len(parent):
                return False
            del parent[index]
            return True
        case NodeShape.INDEXABLE if hasattr(parent, "__delitem__"):
            if last not in parent:
                return False
            del parent[last]
            return True
        case NodeShape.RECORD:
            name = str(last)
            if name not in _record_state(parent):
                return False
            try:
                delattr(parent, name)
            except _SETATTR_ERRORS:
                return False
            return True
        case _:
            return False


def getter(path: Any, default: Any = None) -> Callable[[Any], Any]:
    """Build a one-argument function that resolves `path` on its input."""
    segments = split_path(path)
    return lambda target: data_get(target, segments, default)
