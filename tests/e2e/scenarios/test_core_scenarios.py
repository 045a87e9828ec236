# tests/e2e/scenarios/test_core_scenarios.py
"""E2E: fetch-truncate-output, filtering with missing fields, and a mid-run crash."""

from __future__ import annotations

import httpx
import respx

from pipeforge.contracts.enums import ExecutionStatus, NodeStatus
from pipeforge.core.config import PipeforgeSettings, SecuritySettings
from pipeforge.engine import PipeExecutor
from tests.fixtures.operators import build_registry
from tests.fixtures.pipes import linear_pipe, node

API_URL = "https://api.example.com/people"

PEOPLE = [{"name": f"person-{i}", "age": 10 + i * 3} for i in range(8)]


def _executor() -> PipeExecutor:
    return PipeExecutor(build_registry(), PipeforgeSettings(security=SecuritySettings(domain_whitelist=("api.example.com",))))


@respx.mock
def test_fetch_truncate_output() -> None:
    respx.get(API_URL).mock(return_value=httpx.Response(200, json=PEOPLE))
    definition = linear_pipe(
        node("fetch-1", "fetch-json", url=API_URL),
        node("truncate-1", "truncate", count=5),
        node("output-1", "pipe-output"),
    )

    outcome = _executor().execute(definition)

    assert outcome.status == ExecutionStatus.COMPLETED
    assert outcome.final_result == PEOPLE[:5]
    assert outcome.execution_order == ("fetch-1", "truncate-1", "output-1")


def test_filter_excludes_items_without_field() -> None:
    items = [{"name": "a", "age": 30}, {"name": "b"}, {"name": "c", "age": 12}, {"name": "d", "age": "42"}, {"name": "e", "age": None}]
    definition = linear_pipe(
        node("src", "static", items=items),
        node("filter-1", "filter", mode="permit", matchMode="all", rules=[{"field": "age", "operator": "gt", "value": 18}]),
        node("output-1", "pipe-output"),
    )

    outcome = _executor().execute(definition)

    assert outcome.succeeded
    assert [item["name"] for item in outcome.final_result] == ["a", "d"]


def test_crash_mid_run_is_sanitized_and_halts() -> None:
    definition = linear_pipe(
        node("src", "static", items=[1, 2, 3]),
        node("boom-1", "boom"),
        node("truncate-1", "truncate", count=1),
        node("output-1", "pipe-output"),
    )

    outcome = _executor().execute(definition)

    assert outcome.status == ExecutionStatus.FAILED
    assert outcome.node_id == "boom-1"
    assert outcome.operator_type == "boom"
    assert outcome.error == "Operator boom-1 (boom) failed: Unexpected error in operator: RuntimeError"
    assert "db.internal" not in outcome.error
    assert outcome.intermediate_results["src"].status == NodeStatus.SUCCESS
    assert outcome.intermediate_results["boom-1"].status == NodeStatus.ERROR
    assert set(outcome.intermediate_results) == {"src", "boom-1"}
    assert outcome.last_successful_result == [1, 2, 3]
