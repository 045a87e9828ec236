"""Shared contracts for cross-boundary data types.

This package is a leaf: it never imports from core, engine, or operators
at runtime.

Import patterns:
    from pipeforge.contracts import PipeDefinition, ExecutionOutcome
    from pipeforge.contracts.errors import SecurityError
"""

from pipeforge.contracts.context import CancellationToken, ExecutionContext, SecretsProvider
from pipeforge.contracts.definition import DefinitionParseError, Edge, OperatorNode, PipeDefinition
from pipeforge.contracts.enums import (
    ExecutionStatus,
    FailureKind,
    NodeStatus,
    OperatorCategory,
    SchemaFieldType,
    SchemaRootType,
    ValidationErrorType,
)
from pipeforge.contracts.errors import (
    DuplicateOperatorError,
    ExecutionCancelledError,
    FetchError,
    OperatorConfigError,
    OperatorExecutionError,
    PipeforgeError,
    PipeTimeoutError,
    SecurityError,
)
from pipeforge.contracts.results import (
    ExecutionOutcome,
    IntermediateResult,
    PipeValidationResult,
    ValidationIssue,
    ValidationResult,
)
from pipeforge.contracts.schema import ExtractedSchema, SchemaField

__all__ = [
    "CancellationToken",
    "DefinitionParseError",
    "DuplicateOperatorError",
    "Edge",
    "ExecutionCancelledError",
    "ExecutionContext",
    "ExecutionOutcome",
    "ExecutionStatus",
    "ExtractedSchema",
    "FailureKind",
    "FetchError",
    "IntermediateResult",
    "NodeStatus",
    "OperatorCategory",
    "OperatorConfigError",
    "OperatorExecutionError",
    "OperatorNode",
    "PipeDefinition",
    "PipeTimeoutError",
    "PipeValidationResult",
    "PipeforgeError",
    "SchemaField",
    "SchemaFieldType",
    "SchemaRootType",
    "SecretsProvider",
    "SecurityError",
    "ValidationErrorType",
    "ValidationIssue",
    "ValidationResult",
]
