from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import types as _types
import typing as _typing

from . import _columns


__all__ = [
    "SchemaMapping",
    "map_columns",
]


_LOGGER = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True, slots=True)
class SchemaMapping:
    """Column index of each logical field present in a query result."""

    table: _columns.Table
    indices: _typing.Mapping[str, int]

    def __contains__(self, name: object) -> bool:
        return name in self.indices

    def index_of(self, name: str) -> int | None:
        return self.indices.get(name)

    @property
    def missing_optional(self) -> list[str]:
        return [c.name for c in self.table.optional_columns if c.name not in self]


def map_columns(
    header: _typing.Sequence[str],
    table: _columns.Table = _columns.MEMBER_TABLE,
) -> SchemaMapping:
    """Map the columns of *table* to their position in *header*.

    Labels are compared literally (case-sensitive).  Optional columns
    that are not part of *header* are left out of the mapping, missing
    mandatory columns raise :obj:`~green2.SchemaMismatchError`.

    >>> mapping = map_columns(["Name", "Spitzname"], _columns.NICKNAME_TABLE)
    >>> dict(mapping.indices)
    {'name': 0, 'nickname': 1}
    """
    from . import _errors

    first_index: dict[str, int] = {}
    for idx, label in enumerate(header):
        if label in first_index:
            _LOGGER.warning(
                "[schema] Column %r occurs more than once in table %s, use first",
                label,
                table.name,
            )
            continue
        first_index[label] = idx

    indices: dict[str, int] = {}
    missing: list[str] = []
    for column in table:
        if (idx := first_index.get(column.label)) is not None:
            indices[column.name] = idx
        elif column.optional:
            _LOGGER.debug(
                "[schema] Optional column %s not in table %s", column.label, table.name
            )
        else:
            missing.append(column.label)

    if missing:
        err = _errors.SchemaMismatchError(missing, table=table.name)
        _LOGGER.error("[schema] %s", err)
        raise err
    return SchemaMapping(table, _types.MappingProxyType(indices))
