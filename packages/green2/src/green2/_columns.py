"""Column descriptors of the database tables read by green2.

A :obj:`Table` lists the logical fields of a database table together
with the label of the physical column holding each field and the kind
of value stored in it.  :obj:`parse_cell` turns the textual cell value
of a query result into a typed value.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import typing as _typing


__all__ = [
    "MEMBER_TABLE",
    "NICKNAME_TABLE",
    "ColumnDescriptor",
    "ColumnKind",
    "Table",
    "parse_cell",
]


class ColumnKind(_enum.Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    AMOUNT = "amount"

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}.{self.name}"


_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "no", "n", ""})


def parse_cell(kind: ColumnKind, value: str, /) -> _typing.Any:
    """Parse the cell *value* of a column of kind *kind*.

    Raises :obj:`ValueError` if *value* cannot be parsed.

    >>> parse_cell(ColumnKind.INTEGER, "42")
    42
    >>> parse_cell(ColumnKind.BOOLEAN, "1")
    True
    >>> parse_cell(ColumnKind.DATE, "2017-02-20")
    datetime.date(2017, 2, 20)
    >>> parse_cell(ColumnKind.AMOUNT, "10.5")
    1050
    """
    from . import _util

    match kind:
        case ColumnKind.STRING:
            return value
        case ColumnKind.INTEGER:
            return int(value.strip(), base=10)
        case ColumnKind.BOOLEAN:
            s_low = value.strip().lower()
            if s_low in _TRUE_STRINGS:
                return True
            elif s_low in _FALSE_STRINGS:
                return False
            else:
                raise ValueError(f"Expected boolean, got {value!r}")
        case ColumnKind.DATE:
            if not value.strip():
                raise ValueError("Expected date, got empty string")
            return _util.to_date_or_none(value)
        case ColumnKind.AMOUNT:
            return _util.amount_to_cents(value)
        case _:
            raise ValueError(f"Unsupported column kind {kind!r}")


@_dataclasses.dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    name: str
    label: str
    kind: ColumnKind = ColumnKind.STRING
    optional: bool = False

    def parse(self, value: str, /) -> _typing.Any:
        return parse_cell(self.kind, value)


@_dataclasses.dataclass(frozen=True, slots=True)
class Table:
    name: str
    columns: tuple[ColumnDescriptor, ...]

    def __getitem__(self, name: str) -> ColumnDescriptor:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def __iter__(self) -> _typing.Iterator[ColumnDescriptor]:
        return iter(self.columns)

    @property
    def mandatory_columns(self) -> tuple[ColumnDescriptor, ...]:
        return tuple(c for c in self.columns if not c.optional)

    @property
    def optional_columns(self) -> tuple[ColumnDescriptor, ...]:
        return tuple(c for c in self.columns if c.optional)

    @property
    def labels(self) -> list[str]:
        return [c.label for c in self.columns]


def _col(name, label, kind=ColumnKind.STRING, *, optional=False) -> ColumnDescriptor:
    return ColumnDescriptor(name, label, kind, optional)


MEMBER_TABLE = Table(
    "Mitglieder",
    (
        _col("membership_number", "Mitgliedsnummer", ColumnKind.INTEGER),
        _col("prename", "Vorname"),
        _col("lastname", "Nachname"),
        _col("title", "Titel"),
        _col("is_male", "IstMaennlich", ColumnKind.BOOLEAN),
        _col("birthday", "Geburtstag", ColumnKind.DATE),
        _col("street", "Strasse"),
        _col("house_number", "Hausnummer"),
        _col("postcode", "PLZ"),
        _col("place", "Ort"),
        _col("is_active", "IstAktiv", ColumnKind.BOOLEAN, optional=True),
        _col("is_contribution_free", "IstBeitragsfrei", ColumnKind.BOOLEAN),
        _col("iban", "Iban"),
        _col("bic", "Bic"),
        _col("account_holder_prename", "KontoinhaberVorname", optional=True),
        _col("account_holder_lastname", "KontoinhaberNachname", optional=True),
        _col("mandate_signed", "MandatErstellt", ColumnKind.DATE),
        _col("mandate_changed", "MandatGeaendert", ColumnKind.BOOLEAN, optional=True),
        _col("contribution", "Beitrag", ColumnKind.AMOUNT, optional=True),
        _col("member_since", "MitgliedSeit", ColumnKind.DATE, optional=True),
    ),
)

NICKNAME_TABLE = Table(
    "Spitznamen",
    (
        _col("name", "Name"),
        _col("nickname", "Spitzname"),
    ),
)
