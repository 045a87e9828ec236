"""Status codes, categories, and kinds used across subsystem boundaries."""

from enum import StrEnum


class OperatorCategory(StrEnum):
    """Grouping of operators, mirrored by the editor palette.

    Sources and user inputs never take an input edge.
    """

    SOURCES = "sources"
    USER_INPUTS = "user-inputs"
    OPERATORS = "operators"
    STRING = "string"
    URL = "url"

    @property
    def is_source(self) -> bool:
        return self in (OperatorCategory.SOURCES, OperatorCategory.USER_INPUTS)


class ValidationErrorType(StrEnum):
    """Kinds of problem reported by the graph validator."""

    UNKNOWN_OPERATOR = "unknown_operator"
    INVALID_CONNECTION = "invalid_connection"
    CYCLE_DETECTED = "cycle_detected"
    OPERATOR_LIMIT = "operator_limit"
    INVALID_STRUCTURE = "invalid_structure"
    INVALID_CONFIG = "invalid_config"
    MISSING_OUTPUT = "missing_output"


class ExecutionStatus(StrEnum):
    """Terminal status of one pipe execution."""

    COMPLETED = "completed"
    FAILED = "failed"


class NodeStatus(StrEnum):
    """Status of a single node that ran."""

    SUCCESS = "success"
    ERROR = "error"


class FailureKind(StrEnum):
    """Why a failed execution failed.

    VALIDATION_ERROR is reported before any node runs (e.g. a required
    user input has no value). OPERATOR_ERROR means a node raised.
    """

    VALIDATION_ERROR = "validation_error"
    OPERATOR_ERROR = "operator_error"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


class SchemaFieldType(StrEnum):
    """Inferred type of a field in an extracted schema."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


class SchemaRootType(StrEnum):
    ARRAY = "array"
    OBJECT = "object"
