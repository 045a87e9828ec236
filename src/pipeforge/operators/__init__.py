# src/pipeforge/operators/__init__.py
"""Operator system: built-in operators discovered via pluggy.

- Base class: Operator, with typed pydantic configs (config_base)
- Registry: OperatorRegistry plus the register_builtin_operators bootstrap
- Hookspecs: pluggy hook definitions for operator packages

Operator packages:
- sources: fetch-json, fetch-csv, fetch-rss, fetch-page
- inputs: text-input, number-input, url-input, date-input
- transforms: filter, sort, transform, unique, truncate, tail, rename
- string: string-replace, regex, substring
- url: url-builder
- pipe_output: pipe-output
"""

from pipeforge.operators.base import Operator
from pipeforge.operators.config_base import OperatorConfig
from pipeforge.operators.registry import OperatorRegistry, create_plugin_manager, register_builtin_operators

__all__ = [
    "Operator",
    "OperatorConfig",
    "OperatorRegistry",
    "create_plugin_manager",
    "register_builtin_operators",
]
