"""Hook implementation registering the built-in URL operators."""

from typing import Any

from pipeforge.operators.hookspecs import hookimpl


class URLOperators:
    @hookimpl
    def pipeforge_get_operators(self) -> list[type[Any]]:
        from pipeforge.operators.url.builder import URLBuilderOperator

        return [URLBuilderOperator]


builtin_url_operators = URLOperators()
