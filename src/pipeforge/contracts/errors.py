"""Exception hierarchy for pipeforge.

Every PipeforgeError carries a message that is safe to show to the person
who authored the pipe. The execution engine surfaces these verbatim and
sanitizes anything else before it leaves a run.
"""


class PipeforgeError(Exception):
    """Base error with a user-safe message."""


class DuplicateOperatorError(PipeforgeError):
    """An operator type or alias is already taken in a registry."""


class OperatorConfigError(PipeforgeError):
    """Operator configuration could not be parsed into its typed config."""


class SecurityError(PipeforgeError):
    """A URL or regex was rejected by a security guard."""


class OperatorExecutionError(PipeforgeError):
    """An operator failed while executing (bad input shape, bad value)."""


class FetchError(OperatorExecutionError):
    """HTTP fetch failed.

    Attributes:
        status_code: HTTP status if a response was received, else None.
        retryable: True for failures that may succeed on a later run
            (timeouts, 429, 5xx, connection errors).
    """

    def __init__(self, message: str, *, status_code: int | None = None, retryable: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class ExecutionCancelledError(PipeforgeError):
    """Execution was cancelled through its cancellation token."""

    def __init__(self, message: str = "Execution cancelled") -> None:
        super().__init__(message)


class PipeTimeoutError(PipeforgeError):
    """The pipe or a single operator exceeded its time limit."""


class SettingsError(PipeforgeError):
    """A settings value could not be resolved (e.g. an unset ${VAR}).

    Attributes:
        key: Dotted settings path of the offending value, e.g.
            "security.user_agent".
    """

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key
