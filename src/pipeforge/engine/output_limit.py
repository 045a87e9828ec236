# src/pipeforge/engine/output_limit.py
"""Cap the serialized size of each node's result.

Sizes are measured as UTF-8 JSON. An oversized list is cut to the longest
prefix that fits and wrapped with metadata; any other oversized value is
replaced by a notice, since there is no safe way to cut it:

    {"_truncated": true, "_originalCount": 5000, "_returnedCount": 1200,
     "_warning": "Output truncated: ...", "data": [...first 1200 items...]}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

DEFAULT_MAX_OUTPUT_BYTES = 1024 * 1024


@dataclass(frozen=True, slots=True)
class OutputLimitResult:
    output: Any
    truncated: bool
    original_size: int
    final_size: int
    original_count: int | None = None
    final_count: int | None = None


def output_size(value: Any) -> int:
    """Serialized size in bytes; values JSON cannot encode are sized by str().

    Raises:
        TypeError: If a dict key is not a str, int, float, bool or None.
        ValueError: If value contains a circular reference.
    """
    if value is None:
        return 0
    return len(json.dumps(value, ensure_ascii=False, default=str, separators=(",", ":")).encode("utf-8"))


def _describe_limit(max_bytes: int) -> str:
    mib = 1024 * 1024
    if max_bytes % mib == 0:
        return f"{max_bytes // mib}MB"
    return f"{max_bytes} bytes"


def enforce_output_limit(output: Any, max_bytes: int = DEFAULT_MAX_OUTPUT_BYTES) -> OutputLimitResult:
    """Return output unchanged if it fits, else a truncated stand-in.

    Examples:
        >>> enforce_output_limit([1, 2, 3]).truncated
        False
        >>> enforce_output_limit(list(range(100)), max_bytes=20).output["_returnedCount"]
        9
    """
    original_size = output_size(output)
    if original_size <= max_bytes:
        return OutputLimitResult(output=output, truncated=False, original_size=original_size, final_size=original_size)
    if isinstance(output, list):
        return _truncate_list(output, max_bytes, original_size)

    notice = {
        "_truncated": True,
        "_error": f"Output truncated: Data exceeded {_describe_limit(max_bytes)} limit",
        "_originalSize": original_size,
        "_maxSize": max_bytes,
    }
    return OutputLimitResult(output=notice, truncated=True, original_size=original_size, final_size=output_size(notice))


def _truncate_list(items: list[Any], max_bytes: int, original_size: int) -> OutputLimitResult:
    original_count = len(items)

    # Binary search for the longest prefix that fits.
    low, high, best = 0, original_count, 0
    while low <= high:
        mid = (low + high) // 2
        if output_size(items[:mid]) <= max_bytes:
            best = mid
            low = mid + 1
        else:
            high = mid - 1

    limit = _describe_limit(max_bytes)
    if best == 0:
        wrapped: dict[str, Any] = {
            "_truncated": True,
            "_error": f"Output truncated: Individual items exceed {limit} limit",
            "_originalCount": original_count,
            "_originalSize": original_size,
            "data": [],
        }
    else:
        wrapped = {
            "_truncated": True,
            "_originalCount": original_count,
            "_returnedCount": best,
            "_warning": f"Output truncated: Data exceeded {limit} limit. Showing {best} of {original_count} items.",
            "data": items[:best],
        }
    return OutputLimitResult(
        output=wrapped,
        truncated=True,
        original_size=original_size,
        final_size=output_size(wrapped),
        original_count=original_count,
        final_count=best,
    )
