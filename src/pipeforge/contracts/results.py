"""Result types returned by the validator and the execution engine.

All result types are frozen: once a node has run, its IntermediateResult
is never changed, and an ExecutionOutcome is the terminal artifact of a run.
to_dict() renders the camelCase wire shape callers persist or return.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pipeforge.contracts.enums import ExecutionStatus, FailureKind, NodeStatus, ValidationErrorType


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of an operator's validate(config)."""

    valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def failure(cls, error: str) -> ValidationResult:
        return cls(valid=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        if self.valid:
            return {"valid": True}
        return {"valid": False, "error": self.error}


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single typed problem found in a pipe definition."""

    type: ValidationErrorType
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type.value, "message": self.message}
        if self.node_id is not None:
            result["nodeId"] = self.node_id
        if self.edge_id is not None:
            result["edgeId"] = self.edge_id
        return result


@dataclass(frozen=True, slots=True)
class PipeValidationResult:
    """All problems found in a definition; valid iff there are none."""

    errors: tuple[ValidationIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    def of_type(self, error_type: ValidationErrorType) -> list[ValidationIssue]:
        return [e for e in self.errors if e.type == error_type]

    def merge(self, other: PipeValidationResult) -> PipeValidationResult:
        return PipeValidationResult(errors=self.errors + other.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": [e.to_dict() for e in self.errors]}


@dataclass(frozen=True, slots=True)
class IntermediateResult:
    """What one node produced. Only nodes that actually ran get one."""

    node_id: str
    type: str
    label: str
    result: Any
    execution_time: float
    status: NodeStatus
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "nodeId": self.node_id,
            "type": self.type,
            "label": self.label,
            "result": self.result,
            "executionTime": self.execution_time,
            "status": self.status.value,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Terminal, immutable artifact of one execution run.

    On failure, execution_order and intermediate_results list only nodes
    that started; a node missing from both did not run.
    """

    status: ExecutionStatus
    intermediate_results: Mapping[str, IntermediateResult] = field(default_factory=lambda: MappingProxyType({}))
    execution_order: tuple[str, ...] = ()
    total_execution_time: float = 0.0
    final_result: Any = None
    error: str | None = None
    node_id: str | None = None
    operator_type: str | None = None
    failure_kind: FailureKind | None = None
    last_successful_result: Any = None

    @property
    def succeeded(self) -> bool:
        return self.status == ExecutionStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": self.status.value,
            "intermediateResults": {k: v.to_dict() for k, v in self.intermediate_results.items()},
            "executionOrder": list(self.execution_order),
            "totalExecutionTime": self.total_execution_time,
        }
        if self.succeeded:
            result["finalResult"] = self.final_result
            return result
        result["error"] = self.error
        result["nodeId"] = self.node_id
        result["operatorType"] = self.operator_type
        if self.failure_kind is not None:
            result["errorType"] = self.failure_kind.value
        if self.last_successful_result is not None:
            result["lastSuccessfulResult"] = self.last_successful_result
        return result
