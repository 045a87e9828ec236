# tests/unit/engine/test_output_limit.py
"""Tests for per-node output size limiting."""

from __future__ import annotations

from pipeforge.engine.output_limit import enforce_output_limit, output_size


def test_small_output_unchanged() -> None:
    data = [{"a": 1}]
    result = enforce_output_limit(data)

    assert result.output is data
    assert not result.truncated
    assert result.original_size == result.final_size == output_size(data)


def test_none_has_zero_size() -> None:
    assert output_size(None) == 0
    assert not enforce_output_limit(None, max_bytes=1).truncated


def test_size_counts_utf8_bytes() -> None:
    assert output_size("é") == len('"é"'.encode())


def test_list_cut_to_longest_fitting_prefix() -> None:
    result = enforce_output_limit(list(range(100)), max_bytes=20)

    assert result.truncated
    assert result.output["data"] == list(range(9))
    assert result.output["_originalCount"] == 100
    assert result.output["_returnedCount"] == 9
    assert result.output["_warning"] == "Output truncated: Data exceeded 20 bytes limit. Showing 9 of 100 items."
    assert (result.original_count, result.final_count) == (100, 9)


def test_megabyte_limit_described_in_mb() -> None:
    big = ["x" * 1000] * 2000
    result = enforce_output_limit(big)

    assert result.output["_warning"].startswith("Output truncated: Data exceeded 1MB limit. Showing ")
    assert output_size(result.output["data"]) <= 1024 * 1024


def test_single_oversized_item() -> None:
    result = enforce_output_limit(["x" * 100], max_bytes=10)

    assert result.output["data"] == []
    assert result.output["_error"] == "Output truncated: Individual items exceed 10 bytes limit"


def test_oversized_object_replaced_by_notice() -> None:
    result = enforce_output_limit({"body": "x" * (2 * 1024 * 1024)})

    assert result.truncated
    assert result.output["_error"] == "Output truncated: Data exceeded 1MB limit"
    assert result.output["_maxSize"] == 1024 * 1024
    assert "body" not in result.output
