from __future__ import annotations

import enum as _enum
import typing as _typing


__all__ = [
    "DuplicatePolicy",
    "QueryResult",
    "SequenceType",
]


QueryResult = _typing.Sequence[_typing.Sequence["str | None"]]
"""Result of a database query: row 0 holds the column labels."""


class SequenceType(_enum.StrEnum):
    """Sequence type of a SEPA direct debit (``SeqTp``).

    >>> str(SequenceType.RECURRING)
    'RCUR'
    >>> SequenceType("FRST")
    SequenceType.FIRST
    """

    FIRST = "FRST"
    RECURRING = "RCUR"
    ONE_OFF = "OOFF"
    FINAL = "FNAL"

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}.{self.name}"


class DuplicatePolicy(_enum.StrEnum):
    """What to do with rows sharing a membership number."""

    ERROR = "error"
    KEEP_FIRST = "keep_first"
    KEEP_LAST = "keep_last"

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}.{self.name}"
