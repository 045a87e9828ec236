# tests/fixtures/__init__.py
"""Shared builders for pipeforge tests."""

from tests.fixtures.pipes import edge, input_node, linear_pipe, node, pipe

__all__ = ["edge", "input_node", "linear_pipe", "node", "pipe"]
