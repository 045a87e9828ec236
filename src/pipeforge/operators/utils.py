"""Dot-path helpers shared by the field-level operators.

Items flowing through a pipe are plain JSON-shaped values (dicts, lists,
scalars). Operators address fields inside an item with dot notation
("user.profile.name"). Reads never raise; writes create intermediate
objects as needed.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from pipeforge.operators.sentinels import MISSING


def get_nested_field(
    data: Any,
    path: str,
    default: Any = MISSING,
) -> Any:
    """Get value from nested dict using dot notation.

    Returns the MISSING sentinel (or custom default) if any segment of the
    path is absent or the value being traversed is not a dict.

    Examples:
        >>> data = {"user": {"name": "Alice", "age": 30}}
        >>> get_nested_field(data, "user.name")
        'Alice'
        >>> get_nested_field(data, "user.email") is MISSING
        True
        >>> get_nested_field(data, "user.email", default="unknown")
        'unknown'
    """
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def set_nested_field(data: dict[str, Any], path: str, value: Any) -> None:
    """Set value in nested dict using dot notation, creating parents.

    A parent segment holding a non-dict value is replaced by a new dict.

    Examples:
        >>> row = {}
        >>> set_nested_field(row, "meta.source", "feed")
        >>> row
        {'meta': {'source': 'feed'}}
    """
    *parents, last = path.split(".")
    current = data
    for part in parents:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[last] = value


def delete_nested_field(data: dict[str, Any], path: str) -> None:
    """Remove the value at path; a missing path is a no-op."""
    *parents, last = path.split(".")
    current: Any = data
    for part in parents:
        if not isinstance(current, dict) or part not in current:
            return
        current = current[part]
    if isinstance(current, dict):
        current.pop(last, None)


def map_items(data: Any, fn: Callable[[Any], Any]) -> Any:
    """Apply fn to each element of a list, or to a single value.

    None passes through as None.
    """
    if data is None:
        return None
    if isinstance(data, list):
        return [fn(item) for item in data]
    return fn(data)


def replace_string_field(item: Any, path: str, fn: Callable[[str], Any]) -> Any:
    """Rewrite one string field of an item, returning a new item.

    Non-dict items, missing fields and non-string fields leave the item
    unchanged. The original item is never mutated.
    """
    if not isinstance(item, dict):
        return item
    value = get_nested_field(item, path)
    if not isinstance(value, str):
        return item
    result = copy.deepcopy(item)
    set_nested_field(result, path, fn(value))
    return result


def describe_type(value: Any) -> str:
    """Name a value's JSON type the way pipe authors see it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
