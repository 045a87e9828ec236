"""Hook implementation registering the built-in transform operators."""

from typing import Any

from pipeforge.operators.hookspecs import hookimpl


class TransformOperators:
    @hookimpl
    def pipeforge_get_operators(self) -> list[type[Any]]:
        from pipeforge.operators.transforms.filter import FilterOperator
        from pipeforge.operators.transforms.rename import RenameOperator
        from pipeforge.operators.transforms.sort import SortOperator
        from pipeforge.operators.transforms.transform import TransformOperator
        from pipeforge.operators.transforms.truncate import TailOperator, TruncateOperator
        from pipeforge.operators.transforms.unique import UniqueOperator

        return [
            FilterOperator,
            SortOperator,
            TransformOperator,
            UniqueOperator,
            TruncateOperator,
            TailOperator,
            RenameOperator,
        ]


builtin_transforms = TransformOperators()
