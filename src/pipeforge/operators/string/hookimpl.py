"""Hook implementation registering the built-in string operators."""

from typing import Any

from pipeforge.operators.hookspecs import hookimpl


class StringOperators:
    @hookimpl
    def pipeforge_get_operators(self) -> list[type[Any]]:
        from pipeforge.operators.string.regex import RegexOperator
        from pipeforge.operators.string.replace import StringReplaceOperator
        from pipeforge.operators.string.substring import SubstringOperator

        return [StringReplaceOperator, RegexOperator, SubstringOperator]


builtin_string_operators = StringOperators()
