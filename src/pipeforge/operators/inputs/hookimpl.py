"""Hook implementation registering the built-in user-input operators."""

from typing import Any

from pipeforge.operators.hookspecs import hookimpl


class InputOperators:
    @hookimpl
    def pipeforge_get_operators(self) -> list[type[Any]]:
        from pipeforge.operators.inputs.date import DateInputOperator
        from pipeforge.operators.inputs.number import NumberInputOperator
        from pipeforge.operators.inputs.text import TextInputOperator
        from pipeforge.operators.inputs.url import URLInputOperator

        return [TextInputOperator, NumberInputOperator, URLInputOperator, DateInputOperator]


builtin_inputs = InputOperators()
