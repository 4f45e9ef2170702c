"""Query results as exported from the club database.

A query result is a sequence of rows, each a sequence of optional
strings.  Row 0 holds the column labels.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing


if _typing.TYPE_CHECKING:
    import pandas as _pandas

    from . import _file, _types


__all__ = [
    "NULL_STRINGS",
    "check_query_result",
    "load_query_result",
    "query_result_from_dataframe",
]


_LOGGER = _logging.getLogger(__name__)

NULL_STRINGS = ["NULL", "\\N"]


def check_query_result(query_result: _types.QueryResult, /) -> None:
    if not query_result:
        raise ValueError("Empty query result, expected at least a header row")
    header = query_result[0]
    if not all(isinstance(label, str) for label in header):
        raise ValueError(f"Invalid header row {list(header)!r}")


def query_result_from_dataframe(df: _pandas.DataFrame) -> list[list[str | None]]:
    """Convert *df* into a query result with all cells as strings.

    >>> import pandas as pd
    >>> df = pd.DataFrame({"Vorname": ["Erika", None], "PLZ": [12345, 54321]})
    >>> query_result_from_dataframe(df)
    [['Vorname', 'PLZ'], ['Erika', '12345'], [None, '54321']]
    """
    import pandas as pd

    def to_cell(value) -> str | None:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            return None
        return str(value)

    header = [str(col) for col in df.columns]
    rows = [[to_cell(v) for v in row] for row in df.itertuples(index=False)]
    return [header, *rows]


def load_query_result(
    path: _file.PathLike, *, sep: str = ";", sheet_name: str | int = 0
) -> list[list[str | None]]:
    """Load an exported query result from a CSV or Excel file.

    Empty cells stay empty strings, ``NULL`` and ``\\N`` become `None`.
    """
    import os
    import pathlib

    import pandas as pd

    path = pathlib.Path(os.fsdecode(path))
    _LOGGER.info("Read query result %s", path)
    if path.suffix.lower() in (".xlsx", ".xls"):
        df = pd.read_excel(
            path,
            sheet_name=sheet_name,
            dtype=str,
            keep_default_na=False,
            na_values=NULL_STRINGS,
        )
    else:
        df = pd.read_csv(
            path,
            sep=sep,
            dtype=str,
            keep_default_na=False,
            na_values=NULL_STRINGS,
            encoding="utf-8-sig",
        )
    return query_result_from_dataframe(df)
