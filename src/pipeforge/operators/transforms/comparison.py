"""Value comparison rules for filter and sort.

Pipe data is loosely typed: a number fetched from a CSV may arrive as the
string "42", a boolean from a form as "true". These helpers compare values
the way a pipe author expects rather than by Python type.
"""

from __future__ import annotations

import re
from typing import Any

from pipeforge.core.dates import parse_date_string

_NUMERIC_LITERAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_PLAIN_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def _sign(delta: float) -> int:
    return (delta > 0) - (delta < 0)


def coerce_number(value: Any) -> float | None:
    """Numeric value of a number, boolean, or numeric string.

    An empty or blank string counts as 0, as it does for form inputs.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _NUMERIC_LITERAL.match(text):
            return float(text)
    return None


def display_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return "null"
    return str(value)


def compare_text(a: str, b: str) -> int:
    """Case-insensitive ordering with a case-sensitive tie-break."""
    ka, kb = (a.casefold(), a), (b.casefold(), b)
    return (ka > kb) - (ka < kb)


def _as_bool(value: Any) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def _same(a: Any, b: Any) -> bool:
    return type(a) is type(b) and a == b


def loose_equals(a: Any, b: Any) -> bool:
    """Equality across the string/number/boolean divide.

    Examples:
        >>> loose_equals("1", 1)
        True
        >>> loose_equals("true", True)
        True
        >>> loose_equals("abc", "ABC")
        False
    """
    if _same(a, b):
        return True
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, bool) or isinstance(b, bool):
        return _same(_as_bool(a), _as_bool(b))
    if isinstance(a, (str, int, float)) and isinstance(b, (str, int, float)):
        num_a, num_b = coerce_number(a), coerce_number(b)
        if num_a is not None and num_b is not None:
            return num_a == num_b
        return display_string(a) == display_string(b)
    return bool(a == b)


def compare_loose(a: Any, b: Any) -> int:
    """Three-way comparison used by filter's gt/lt/gte/lte rules.

    None sorts below everything. Numbers and numeric strings compare by
    value; when either side is not numeric both are compared as text, so
    "abc" is greater than 18 (digits order before letters) and passes a
    gt 18 rule.
    """
    if a is None:
        return -1
    if b is None:
        return 1
    if isinstance(a, (int, float)) and isinstance(b, (int, float)) and not isinstance(a, bool) and not isinstance(b, bool):
        return _sign(a - b)
    if isinstance(a, str) and isinstance(b, str):
        return compare_text(a, b)
    num_a, num_b = coerce_number(a), coerce_number(b)
    if num_a is not None and num_b is not None:
        return _sign(num_a - num_b)
    return compare_text(display_string(a), display_string(b))


def _plain_number(value: str) -> float | None:
    text = value.strip()
    if not text or not _PLAIN_NUMBER.match(text):
        return None
    return float(text)


def compare_sortable(a: Any, b: Any) -> int:
    """Three-way comparison used by sort.

    Strings that look like dates compare chronologically, numeric strings
    compare numerically, other strings case-insensitively.
    """
    if _same(a, b):
        return 0
    if isinstance(a, str) and isinstance(b, str):
        date_a, date_b = parse_date_string(a), parse_date_string(b)
        if date_a is not None and date_b is not None:
            return _sign((date_a - date_b).total_seconds())
        num_a, num_b = _plain_number(a), _plain_number(b)
        if num_a is not None and num_b is not None:
            return _sign(num_a - num_b)
        return compare_text(a, b)
    if isinstance(a, bool) and isinstance(b, bool):
        return _sign(int(a) - int(b))
    return compare_loose(a, b)
