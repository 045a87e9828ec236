"""Execution engine: runs validated pipes and reports outcomes.

Example:
    registry = register_builtin_operators(OperatorRegistry())
    outcome = PipeExecutor(registry).execute(definition, user_inputs={"input-1": "python"})
    if outcome.succeeded:
        print(outcome.final_result)
"""

from pipeforge.engine.executor import PipeExecutor, sanitize_error
from pipeforge.engine.output_limit import OutputLimitResult, enforce_output_limit

__all__ = ["OutputLimitResult", "PipeExecutor", "enforce_output_limit", "sanitize_error"]
