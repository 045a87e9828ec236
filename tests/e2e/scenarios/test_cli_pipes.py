# tests/e2e/scenarios/test_cli_pipes.py
"""E2E: the CLI validating and running a YAML pipe against a mocked API."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import pytest
import respx
import structlog
import yaml
from typer.testing import CliRunner

from pipeforge.cli import app
from tests.fixtures.pipes import input_node, linear_pipe, node

runner = CliRunner()

BASE = ["--no-dotenv", "--log-level", "WARNING"]

REPOS_URL = "https://api.github.com/orgs/example/repos"

REPOS = [
    {"name": "alpha", "stargazers_count": 12, "language": "Python"},
    {"name": "beta", "stargazers_count": 340, "language": "Go"},
    {"name": "gamma", "stargazers_count": 95, "language": "Python"},
]

PIPE = linear_pipe(
    input_node("lang-1", "text-input", "Language", defaultValue="Python"),
    node("fetch-1", "fetch-json", url=REPOS_URL),
    node("sort-1", "sort", field="stargazers_count", direction="desc"),
    node("transform-1", "transform", mappings=[{"source": "name", "target": "repo"}]),
    node("output-1", "pipe-output"),
)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers = []


@pytest.fixture
def pipe_file(tmp_path: Path) -> Path:
    path = tmp_path / "repos.yaml"
    path.write_text(yaml.safe_dump(PIPE))
    return path


def test_validate_then_run(pipe_file: Path) -> None:
    validated = runner.invoke(app, [*BASE, "validate", str(pipe_file)])
    assert validated.exit_code == 0

    with respx.mock:
        route = respx.get(REPOS_URL).mock(return_value=httpx.Response(200, json=REPOS))
        result = runner.invoke(app, [*BASE, "run", str(pipe_file), "--json"])

    assert result.exit_code == 0, result.output
    assert route.called
    outcome = json.loads(result.stdout)
    assert outcome["status"] == "completed"
    assert outcome["finalResult"] == [{"repo": "beta"}, {"repo": "gamma"}, {"repo": "alpha"}]
    assert outcome["intermediateResults"]["lang-1"]["result"] == "Python"


def test_run_target_stops_at_selected_node(pipe_file: Path) -> None:
    with respx.mock:
        respx.get(REPOS_URL).mock(return_value=httpx.Response(200, json=REPOS))
        result = runner.invoke(app, [*BASE, "run", str(pipe_file), "--json", "--target", "sort-1"])

    assert result.exit_code == 0, result.output
    outcome = json.loads(result.stdout)
    assert outcome["executionOrder"] == ["lang-1", "fetch-1", "sort-1"]
    assert [repo["name"] for repo in outcome["finalResult"]] == ["beta", "gamma", "alpha"]


def test_upstream_failure_exits_nonzero(pipe_file: Path) -> None:
    with respx.mock:
        respx.get(REPOS_URL).mock(return_value=httpx.Response(404, json={"message": "Not Found"}))
        result = runner.invoke(app, [*BASE, "run", str(pipe_file), "--json"])

    assert result.exit_code == 1
    outcome = json.loads(result.stdout)
    assert outcome["status"] == "failed"
    assert outcome["nodeId"] == "fetch-1"
    assert "HTTP 404 (Not Found)" in outcome["error"]
