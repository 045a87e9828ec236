# src/pipeforge/operators/hookspecs.py
"""pluggy hook specifications for pipeforge operators.

Operator packages implement these hooks to contribute operator classes.
The registry bootstrap calls them during discovery.

Usage (implementing an operator package):
    from pipeforge.operators.hookspecs import hookimpl

    class StringOperators:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def pipeforge_get_operators(self):
            return [StringReplaceOperator, RegexOperator]

Note: @hookspec defines the hook interface (done here).
      @hookimpl marks implementations of those hooks.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from pipeforge.operators.base import Operator

# Project name for pluggy
PROJECT_NAME = "pipeforge"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for operator packages to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class PipeforgeOperatorSpec:
    """Hook specifications for operator packages."""

    @hookspec
    def pipeforge_get_operators(self) -> list[type["Operator"]]:  # type: ignore[empty-body]
        """Return operator classes (not instances).

        Returns:
            List of Operator subclasses
        """

    @hookspec
    def pipeforge_get_aliases(self) -> dict[str, str]:  # type: ignore[empty-body]
        """Return legacy type names mapped to the operator type they stand for.

        Returns:
            Mapping of alias -> concrete operator type
        """
