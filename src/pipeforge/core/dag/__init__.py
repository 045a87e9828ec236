"""Pipe graph construction, ordering, and validation."""

from pipeforge.core.dag.graph import GraphCycleError, PipeGraph
from pipeforge.core.dag.validator import PipeValidator, has_cycles

__all__ = ["GraphCycleError", "PipeGraph", "PipeValidator", "has_cycles"]
