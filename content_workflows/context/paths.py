"""Dot-path addressing over nested documents.

A document is a tree of dicts and lists holding JSON-like scalars. A path
such as ``taxonomy.categories.0.slug`` walks it one segment at a time: dict
segments are keys, list segments are decimal indices.

All functions here are pure with respect to their path argument and mutate
only the document they are given.
"""
from __future__ import annotations

from typing import Any, Dict, List, Tuple, Union

Container = Union[Dict[str, Any], List[Any]]

_MISSING = object()


def split_path(path: str) -> List[str]:
    """Split a dot path into its segments."""
    return path.split(".")


def is_container(value: Any) -> bool:
    """Return True for values a path can descend into."""
    return isinstance(value, (dict, list))


def _list_index(segment: str) -> int | None:
    if segment.isdigit():
        return int(segment)
    return None


def _child(current: Any, segment: str) -> Any:
    """Return the child at segment, or _MISSING if it does not resolve."""
    if isinstance(current, dict):
        return current.get(segment, _MISSING)
    if isinstance(current, list):
        index = _list_index(segment)
        if index is not None and index < len(current):
            return current[index]
    return _MISSING


def _resolve(document: Container, path: str) -> Tuple[bool, Any]:
    current: Any = document
    for segment in split_path(path):
        current = _child(current, segment)
        if current is _MISSING:
            return False, None
    return True, current


def get_path(document: Container, path: str) -> Any:
    """Return the value at path, or None if any segment is absent."""
    _, value = _resolve(document, path)
    return value


def has_path(document: Container, path: str) -> bool:
    """Return True if every segment of path resolves (the value may be None)."""
    found, _ = _resolve(document, path)
    return found


def _list_to_dict(items: List[Any]) -> Dict[str, Any]:
    return {str(i): item for i, item in enumerate(items)}


def _assign(container: Container, segment: str, value: Any) -> Container:
    """Assign value under segment and return the container that now holds it.

    A list only accepts decimal segments. Indices past the end pad the list
    with None. Any other segment turns the list into a dict.
    """
    if isinstance(container, list):
        index = _list_index(segment)
        if index is None:
            converted = _list_to_dict(container)
            converted[segment] = value
            return converted
        if index >= len(container):
            container.extend([None] * (index - len(container) + 1))
        container[index] = value
        return container
    container[segment] = value
    return container


def set_path(document: Dict[str, Any], path: str, value: Any) -> None:
    """Assign value at path, creating intermediate dicts as needed.

    Existing containers along the way are kept; a missing or scalar
    intermediate is replaced by an empty dict. The last segment is
    overwritten, never merged.
    """
    segments = split_path(path)
    parents: List[Tuple[Container, str]] = []
    current: Container = document

    for segment in segments[:-1]:
        child = _child(current, segment)
        if not is_container(child):
            child = {}
            current = _assign(current, segment, child)
            _reattach(parents, current)
        parents.append((current, segment))
        current = child

    holder = _assign(current, segments[-1], value)
    if holder is not current:
        _reattach(parents, holder)


def _reattach(parents: List[Tuple[Container, str]], replacement: Container) -> None:
    """Store a list that was converted to a dict back into its parent."""
    if not parents:
        return
    parent, segment = parents[-1]
    if _child(parent, segment) is not replacement:
        _assign(parent, segment, replacement)


def delete_path(document: Container, path: str) -> None:
    """Remove the leaf at path; a path that does not fully resolve is a no-op."""
    segments = split_path(path)
    current: Any = document

    for segment in segments[:-1]:
        current = _child(current, segment)
        if not is_container(current):
            return

    leaf = segments[-1]
    if isinstance(current, dict):
        current.pop(leaf, None)
    elif isinstance(current, list):
        index = _list_index(leaf)
        if index is not None and index < len(current):
            del current[index]


def merge_replace(base: Any, overlay: Any) -> Any:
    """Recursively merge overlay over base and return the combination.

    Dicts merge by key, lists merge index-wise (overlay indices replace,
    remaining base items are kept), anything else is replaced by overlay.
    Callers pass deep copies when the inputs must stay untouched.
    """
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            merged[key] = merge_replace(base[key], value) if key in base else value
        return merged
    if isinstance(base, list) and isinstance(overlay, list):
        merged_list = list(base)
        for index, value in enumerate(overlay):
            if index < len(merged_list):
                merged_list[index] = merge_replace(merged_list[index], value)
            else:
                merged_list.append(value)
        return merged_list
    return overlay


def strictly_equal(left: Any, right: Any) -> bool:
    """Type-strict equality, so that 1, 1.0 and True are all distinct."""
    if type(left) is not type(right):
        return False
    if isinstance(left, list):
        return len(left) == len(right) and all(
            strictly_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, dict):
        return left.keys() == right.keys() and all(
            strictly_equal(value, right[key]) for key, value in left.items()
        )
    return left == right


def _entries(container: Container) -> List[Tuple[Any, Any]]:
    if isinstance(container, list):
        return list(enumerate(container))
    return list(container.items())


def _same_kind(left: Any, right: Any) -> bool:
    return (isinstance(left, dict) and isinstance(right, dict)) or (
        isinstance(left, list) and isinstance(right, list)
    )


def diff_documents(current: Container, original: Container) -> Dict[Any, Any]:
    """Return the parts of current that differ from original.

    A key appears when it is absent from original, when both sides are
    containers of the same kind and their nested diff is non-empty, or when
    the values differ. Lists are diffed by index, so a changed list shows up
    as a dict of its changed int indices. Keys removed from original are not
    reported.
    """
    diff: Dict[Any, Any] = {}
    before_entries = dict(_entries(original))

    for key, value in _entries(current):
        if key not in before_entries:
            diff[key] = value
            continue
        before = before_entries[key]
        if _same_kind(value, before):
            nested = diff_documents(value, before)
            if nested:
                diff[key] = nested
        elif not strictly_equal(value, before):
            diff[key] = value

    return diff
