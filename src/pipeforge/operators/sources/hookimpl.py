"""Hook implementation registering the built-in fetch operators."""

from typing import Any

from pipeforge.operators.hookspecs import hookimpl


class SourceOperators:
    @hookimpl
    def pipeforge_get_operators(self) -> list[type[Any]]:
        from pipeforge.operators.sources.fetch_csv import FetchCSVOperator
        from pipeforge.operators.sources.fetch_json import FetchJSONOperator
        from pipeforge.operators.sources.fetch_page import FetchPageOperator
        from pipeforge.operators.sources.fetch_rss import FetchRSSOperator

        return [FetchJSONOperator, FetchCSVOperator, FetchRSSOperator, FetchPageOperator]

    @hookimpl
    def pipeforge_get_aliases(self) -> dict[str, str]:
        # Pipes saved before the source operators were split use "fetch".
        return {"fetch": "fetch-json"}


builtin_sources = SourceOperators()
