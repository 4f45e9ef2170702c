from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing


__all__ = [
    "DuplicateMemberError",
    "GroupingInputError",
    "OriginatorError",
    "PipelineError",
    "RowDataWarning",
    "SchemaMismatchError",
]


class PipelineError(Exception):
    """Base class of all errors raised by the collection pipeline."""


class SchemaMismatchError(PipelineError):
    """Mandatory column(s) without a matching column in the query result."""

    def __init__(self, columns: str | _typing.Iterable[str], *, table: str = "") -> None:
        self.columns: tuple[str, ...] = (
            (columns,) if isinstance(columns, str) else tuple(columns)
        )
        self.table = table
        in_table = f" in table {table!r}" if table else ""
        super().__init__(
            f"Missing mandatory column(s){in_table}: {', '.join(self.columns)}"
        )

    @property
    def column(self) -> str:
        return self.columns[0]


class DuplicateMemberError(PipelineError):
    def __init__(self, membership_number: int, row_indices: _typing.Sequence[int]):
        self.membership_number = membership_number
        self.row_indices = tuple(row_indices)
        super().__init__(
            f"Duplicate membership number {membership_number} "
            f"in rows {', '.join(str(i) for i in self.row_indices)}"
        )


class GroupingInputError(PipelineError, ValueError):
    """Invalid input to the grouping of members into payment groups."""


class OriginatorError(PipelineError, ValueError):
    def __init__(self, problems: _typing.Sequence[str]) -> None:
        self.problems = tuple(problems)
        super().__init__("Invalid originator: " + "; ".join(self.problems))


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class RowDataWarning:
    """A data quality problem in a single row of a query result.

    The affected field is ``None`` for that member, all other rows are
    processed as usual.
    """

    row_index: int
    message: str
    column: str | None = None
    value: str | None = None
    membership_number: int | None = None

    def __str__(self) -> str:
        where = f"row {self.row_index}"
        if self.membership_number is not None:
            where += f" (member {self.membership_number})"
        if self.column:
            where += f" column {self.column}"
        return f"{where}: {self.message}"
