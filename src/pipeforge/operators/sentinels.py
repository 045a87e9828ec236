"""Sentinel values for the operator layer.

MISSING distinguishes "field not present" from "field present and None"
when reading item fields by path, and "key absent" from "key set to null"
in operator configs.

    value = get_nested_field(item, "meta.author")
    if value is MISSING:
        ...  # leave the item unchanged
"""

from typing import Final


class MissingSentinel:
    """Sentinel class to distinguish missing fields from None values.

    This is a singleton - use the MISSING instance, not the class directly.
    Comparison should always use `is` identity, never equality.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False


MISSING: Final[MissingSentinel] = MissingSentinel()
"""Singleton sentinel indicating a field was not found.

Use identity comparison: `if value is MISSING:`
"""
