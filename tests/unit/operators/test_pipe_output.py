# tests/unit/operators/test_pipe_output.py
"""Tests for the pipe-output operator."""

from __future__ import annotations

from pipeforge.contracts.schema import ExtractedSchema
from pipeforge.operators.pipe_output import PipeOutputOperator


def test_passes_input_through() -> None:
    data = [{"a": 1}]
    assert PipeOutputOperator().execute(data, {}) is data


def test_any_config_is_valid() -> None:
    op = PipeOutputOperator()
    assert op.validate({}).valid
    assert op.validate(None).valid
    assert op.validate({"whatever": [1, 2]}).valid


def test_schema_preserved() -> None:
    schema = ExtractedSchema()
    assert PipeOutputOperator().get_output_schema(schema, {}) is schema
