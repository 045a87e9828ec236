# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- JSON-safe scalar values and items (what flows between nodes)
- Random acyclic pipe graphs in the editor's wire shape

Usage:
    from tests.property.conftest import json_items, acyclic_pipes

    @given(items=json_items)
    def test_operator_preserves_length(items: list) -> None:
        ...
"""

from __future__ import annotations

from typing import Any

from hypothesis import strategies as st

from tests.fixtures.pipes import edge, node, pipe

# =============================================================================
# Hypothesis Settings
# =============================================================================
#
# For standardized @settings decorators, import from tests.property.settings:
#   from tests.property.settings import STANDARD_SETTINGS
#
# Tiers: STANDARD (100), SLOW (50), QUICK (20)
# =============================================================================

# RFC 8259 numbers only: no NaN or infinity
json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(2**53), max_value=2**53),
    st.floats(allow_nan=False, allow_infinity=False, width=64),
    st.text(max_size=20),
)

field_names = st.sampled_from(["id", "name", "score", "tag"])

json_items = st.lists(st.dictionaries(field_names, json_scalars, max_size=4), max_size=30)


@st.composite
def acyclic_pipes(draw: st.DrawFn, max_nodes: int = 12) -> dict[str, Any]:
    """A random DAG: edges only run from lower to higher rank.

    Nodes are listed in shuffled order so definition order and rank differ.
    """
    count = draw(st.integers(min_value=1, max_value=max_nodes))
    ids = [f"n{i}" for i in range(count)]
    pairs = [(a, b) for a in range(count) for b in range(a + 1, count)]
    chosen = draw(st.lists(st.sampled_from(pairs), unique=True, max_size=len(pairs))) if pairs else []
    order = draw(st.permutations(ids))
    return pipe(
        [node(node_id, "sort", field="id") for node_id in order],
        [edge(ids[a], ids[b]) for a, b in chosen],
    )
