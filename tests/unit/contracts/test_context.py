# tests/unit/contracts/test_context.py
"""Tests for ExecutionContext and CancellationToken."""

from __future__ import annotations

import pytest

from pipeforge.contracts.context import CancellationToken, ExecutionContext
from pipeforge.contracts.errors import ExecutionCancelledError, PipeforgeError


def test_for_node_returns_new_context() -> None:
    base = ExecutionContext(user_id="u-1")
    scoped = base.for_node("fetch-1")

    assert scoped.node_id == "fetch-1"
    assert scoped.user_id == "u-1"
    assert base.node_id is None


def test_with_user_inputs_copies_mapping() -> None:
    inputs = {"input-1": "python"}
    ctx = ExecutionContext().with_user_inputs(inputs)
    inputs["input-1"] = "changed"

    assert ctx.user_inputs["input-1"] == "python"
    with pytest.raises(TypeError):
        ctx.user_inputs["input-2"] = "x"  # type: ignore[index]


class TestCancellationToken:
    def test_starts_uncancelled(self) -> None:
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel_raises_pipeforge_error(self) -> None:
        token = CancellationToken()
        token.cancel()

        assert token.cancelled
        with pytest.raises(ExecutionCancelledError, match="Execution cancelled") as exc_info:
            token.raise_if_cancelled()
        assert isinstance(exc_info.value, PipeforgeError)
