from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

from . import _columns, _errors, _people, _types


if _typing.TYPE_CHECKING:
    from . import _schema


__all__ = [
    "MemberExtraction",
    "build_member",
    "load_members",
]


_LOGGER = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class MemberExtraction:
    members: frozenset[_people.Member]
    warnings: tuple[_errors.RowDataWarning, ...] = ()
    rows_total: int = 0

    def sorted_members(self) -> list[_people.Member]:
        return sorted(self.members)


class _RowReader:
    """Reads the fields of a single row, collecting data warnings."""

    def __init__(
        self,
        row: _typing.Sequence[str | None],
        mapping: _schema.SchemaMapping,
        *,
        row_index: int,
        warnings: list[_errors.RowDataWarning],
    ) -> None:
        self.row = row
        self.mapping = mapping
        self.row_index = row_index
        self.warnings = warnings
        self.membership_number: int | None = None

    def warn(self, message: str, column: str | None = None, value=None) -> None:
        warning = _errors.RowDataWarning(
            row_index=self.row_index,
            message=message,
            column=column,
            value=value,
            membership_number=self.membership_number,
        )
        _LOGGER.warning("[members] %s", warning)
        self.warnings.append(warning)

    def has_value(self, name: str) -> bool:
        idx = self.mapping.index_of(name)
        return idx is not None and bool((self.row[idx] or "").strip())

    def get(self, name: str) -> _typing.Any:
        column = self.mapping.table[name]
        idx = self.mapping.index_of(name)
        if idx is None:
            if column.optional:
                return None
            raise _errors.SchemaMismatchError(column.label, table=self.mapping.table.name)
        value = self.row[idx]
        if value is None:
            if not column.optional:
                self.warn("Missing value in mandatory column", column.label)
            return None
        try:
            return column.parse(value)
        except ValueError as exc:
            self.warn(f"Cannot parse value: {exc}", column.label, value)
            return None


def build_member(
    row: _typing.Sequence[str | None],
    mapping: _schema.SchemaMapping,
    *,
    row_index: int = 0,
    default_contribution_cents: int | None = None,
    warnings: list[_errors.RowDataWarning] | None = None,
) -> _people.Member:
    """Build a :obj:`~green2.Member` from a single row of a query result.

    Null or unparseable cells in mandatory columns are recorded in
    *warnings* and the affected field becomes `None`.  The account
    holder names fall back to the member's own names.  The contribution
    is the row's own contribution if present, *default_contribution_cents*
    otherwise.  An unparseable contribution stays `None`, the default
    only replaces a missing or blank one.
    """
    if warnings is None:
        warnings = []
    reader = _RowReader(row, mapping, row_index=row_index, warnings=warnings)
    reader.membership_number = reader.get("membership_number")

    person = _people.Person(
        prename=reader.get("prename"),
        lastname=reader.get("lastname"),
        title=reader.get("title"),
        birthday=reader.get("birthday"),
        is_male=reader.get("is_male"),
    )
    home = _people.Address(
        street=reader.get("street"),
        house_number=reader.get("house_number"),
        postcode=reader.get("postcode"),
        place=reader.get("place"),
    )
    account_holder = _people.AccountHolder(
        prename=reader.get("account_holder_prename") or person.prename,
        lastname=reader.get("account_holder_lastname") or person.lastname,
        title=person.title,
        birthday=person.birthday,
        is_male=person.is_male,
        iban=(reader.get("iban") or "").strip(),
        bic=(reader.get("bic") or "").strip(),
        mandate_signed=reader.get("mandate_signed"),
        mandate_changed=bool(reader.get("mandate_changed")),
    )
    if reader.has_value("contribution"):
        contribution_cents = reader.get("contribution")
    else:
        contribution_cents = default_contribution_cents
    return _people.Member(
        membership_number=reader.membership_number,
        person=person,
        home=home,
        account_holder=account_holder,
        is_active=reader.get("is_active"),
        is_contribution_free=bool(reader.get("is_contribution_free")),
        contribution_cents=contribution_cents,
        member_since=reader.get("member_since"),
    )


def _build_rows(
    rows: _typing.Sequence[tuple[int, _typing.Sequence[str | None]]],
    mapping: _schema.SchemaMapping,
    *,
    header_length: int,
    default_contribution_cents: int | None,
) -> tuple[list[tuple[int, _people.Member]], list[_errors.RowDataWarning]]:
    members = []
    warnings: list[_errors.RowDataWarning] = []
    for row_index, row in rows:
        if len(row) != header_length:
            msg = f"Row has {len(row)} cells, expected {header_length} => skipped"
            _LOGGER.warning("[members] row %s: %s", row_index, msg)
            warnings.append(_errors.RowDataWarning(row_index=row_index, message=msg))
            continue
        member = build_member(
            row,
            mapping,
            row_index=row_index,
            default_contribution_cents=default_contribution_cents,
            warnings=warnings,
        )
        members.append((row_index, member))
    return members, warnings


def _chunks(seq: list, n: int) -> list[list]:
    size = max(1, -(-len(seq) // n))
    return [seq[i : i + size] for i in range(0, len(seq), size)]


def load_members(
    query_result: _types.QueryResult,
    *,
    default_contribution_cents: int | None = None,
    duplicates: _types.DuplicatePolicy | str = _types.DuplicatePolicy.ERROR,
    max_workers: int | None = None,
) -> MemberExtraction:
    """Build all members of *query_result* (row 0 is the header).

    Rows are processed on a thread pool if *max_workers* is greater
    than one.  Rows sharing a membership number are handled according
    to *duplicates*.

    Raises :obj:`~green2.GroupingInputError` if *default_contribution_cents*
    is not a positive amount.
    """
    import concurrent.futures

    from . import _grouping, _query_result, _schema

    if default_contribution_cents is not None:
        _grouping.check_amount(default_contribution_cents, "default contribution")
    _query_result.check_query_result(query_result)
    header, *rows = query_result
    mapping = _schema.map_columns(header, _columns.MEMBER_TABLE)
    duplicates = _types.DuplicatePolicy(duplicates)

    indexed_rows = list(enumerate(rows, start=1))
    kwargs = dict(
        header_length=len(header),
        default_contribution_cents=default_contribution_cents,
    )
    built: list[tuple[int, _people.Member]] = []
    warnings: list[_errors.RowDataWarning] = []
    if max_workers is not None and max_workers > 1 and len(indexed_rows) > 1:
        _LOGGER.debug("[members] Build %s rows using %s workers", len(rows), max_workers)
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [
                pool.submit(_build_rows, chunk, mapping, **kwargs)
                for chunk in _chunks(indexed_rows, max_workers)
            ]
            for future in futures:
                chunk_members, chunk_warnings = future.result()
                built.extend(chunk_members)
                warnings.extend(chunk_warnings)
    else:
        built, warnings = _build_rows(indexed_rows, mapping, **kwargs)

    built.sort(key=lambda item: item[0])
    by_number: dict[int, tuple[int, _people.Member]] = {}
    for row_index, member in built:
        number = member.membership_number
        if number is None:
            msg = "Missing membership number => skipped"
            _LOGGER.warning("[members] row %s: %s", row_index, msg)
            warnings.append(_errors.RowDataWarning(row_index=row_index, message=msg))
            continue
        if (previous := by_number.get(number)) is None:
            by_number[number] = (row_index, member)
            continue
        match duplicates:
            case _types.DuplicatePolicy.ERROR:
                raise _errors.DuplicateMemberError(number, [previous[0], row_index])
            case _types.DuplicatePolicy.KEEP_FIRST:
                dropped = row_index
            case _types.DuplicatePolicy.KEEP_LAST:
                dropped = previous[0]
                by_number[number] = (row_index, member)
        msg = f"Duplicate membership number {number}, row {dropped} dropped"
        _LOGGER.warning("[members] %s", msg)
        warnings.append(
            _errors.RowDataWarning(
                row_index=dropped, message=msg, membership_number=number
            )
        )

    warnings.sort(key=lambda w: w.row_index)
    members = frozenset(member for _, member in by_number.values())
    _LOGGER.info(
        "[members] Built %s members from %s rows (%s warnings)",
        len(members),
        len(rows),
        len(warnings),
    )
    return MemberExtraction(
        members=members, warnings=tuple(warnings), rows_total=len(rows)
    )
