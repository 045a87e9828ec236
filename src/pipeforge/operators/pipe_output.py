# src/pipeforge/operators/pipe_output.py
"""Terminal operator: marks the pipe's result."""

from __future__ import annotations

from typing import Any

from pipeforge.contracts.context import ExecutionContext
from pipeforge.contracts.enums import OperatorCategory
from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import OperatorConfig
from pipeforge.operators.hookspecs import hookimpl

PIPE_OUTPUT_TYPE = "pipe-output"


class PipeOutputConfig(OperatorConfig):
    pass


class PipeOutputOperator(Operator[PipeOutputConfig]):
    """Passes its input through unchanged. Every pipe needs exactly one."""

    type = PIPE_OUTPUT_TYPE
    category = OperatorCategory.OPERATORS
    description = "Final output of the pipe"
    config_model = PipeOutputConfig

    def parse_config(self, config: Any) -> PipeOutputConfig:
        # Any config (including none) is acceptable.
        return PipeOutputConfig()

    def run(self, data: Any, config: PipeOutputConfig, context: ExecutionContext) -> Any:
        return data


class TerminalOperators:
    @hookimpl
    def pipeforge_get_operators(self) -> list[type[Any]]:
        return [PipeOutputOperator]


builtin_terminal = TerminalOperators()
