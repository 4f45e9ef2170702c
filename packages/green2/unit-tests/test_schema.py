import datetime

import pytest
from green2 import (
    MEMBER_TABLE,
    NICKNAME_TABLE,
    ColumnKind,
    SchemaMismatchError,
    map_columns,
    parse_cell,
)
from pytest_green2 import MEMBER_HEADER


@pytest.mark.parametrize(
    "kind,value,expected",
    [
        (ColumnKind.STRING, " Erika ", " Erika "),
        (ColumnKind.INTEGER, "42", 42),
        (ColumnKind.INTEGER, " 7 ", 7),
        (ColumnKind.BOOLEAN, "1", True),
        (ColumnKind.BOOLEAN, "true", True),
        (ColumnKind.BOOLEAN, "0", False),
        (ColumnKind.BOOLEAN, "", False),
        (ColumnKind.DATE, "2017-02-20", datetime.date(2017, 2, 20)),
        (ColumnKind.DATE, "2017-02-20 00:00:00", datetime.date(2017, 2, 20)),
        (ColumnKind.DATE, "20.02.2017", datetime.date(2017, 2, 20)),
        (ColumnKind.AMOUNT, "10", 1000),
        (ColumnKind.AMOUNT, "10.5", 1050),
        (ColumnKind.AMOUNT, "12,34", 1234),
    ],
)
def test_parse_cell(kind, value, expected):
    assert parse_cell(kind, value) == expected


@pytest.mark.parametrize(
    "kind,value",
    [
        (ColumnKind.INTEGER, "4x"),
        (ColumnKind.INTEGER, ""),
        (ColumnKind.BOOLEAN, "maybe"),
        (ColumnKind.DATE, "yesterday"),
        (ColumnKind.DATE, ""),
        (ColumnKind.AMOUNT, "ten"),
        (ColumnKind.AMOUNT, "10.001"),
    ],
)
def test_parse_cell__invalid(kind, value):
    with pytest.raises(ValueError):
        parse_cell(kind, value)


class Test_Table:
    def test_member_table(self):
        assert MEMBER_TABLE.name == "Mitglieder"
        assert MEMBER_TABLE["iban"].label == "Iban"
        assert MEMBER_TABLE["contribution"].optional
        assert not MEMBER_TABLE["membership_number"].optional

    def test_unknown_column(self):
        with pytest.raises(KeyError):
            MEMBER_TABLE["unknown"]

    def test_nickname_table(self):
        assert NICKNAME_TABLE.labels == ["Name", "Spitzname"]


class Test_map_columns:
    def test_full_header(self):
        mapping = map_columns(MEMBER_HEADER)
        assert mapping.index_of("membership_number") == 0
        assert mapping.index_of("iban") == MEMBER_HEADER.index("Iban")
        assert mapping.index_of("contribution") == MEMBER_HEADER.index("Beitrag")

    def test_missing_optional_columns_are_omitted(self):
        header = [c.label for c in MEMBER_TABLE.mandatory_columns]
        mapping = map_columns(header)
        assert "contribution" not in mapping
        assert mapping.index_of("contribution") is None
        assert set(mapping.missing_optional) == {
            c.name for c in MEMBER_TABLE.optional_columns
        }

    def test_missing_mandatory_column(self):
        header = [label for label in MEMBER_HEADER if label != "Iban"]
        with pytest.raises(SchemaMismatchError) as exc_info:
            map_columns(header)
        assert exc_info.value.column == "Iban"
        assert exc_info.value.table == "Mitglieder"

    def test_all_missing_columns_are_reported(self):
        header = [label for label in MEMBER_HEADER if label not in ("Iban", "Bic")]
        with pytest.raises(SchemaMismatchError) as exc_info:
            map_columns(header)
        assert exc_info.value.columns == ("Iban", "Bic")

    def test_case_sensitive(self):
        header = [label.lower() for label in MEMBER_HEADER]
        with pytest.raises(SchemaMismatchError):
            map_columns(header)

    def test_column_order_does_not_matter(self):
        header = list(reversed(MEMBER_HEADER))
        mapping = map_columns(header)
        assert header[mapping.index_of("membership_number")] == "Mitgliedsnummer"

    def test_duplicate_label_uses_first(self):
        header = [*MEMBER_HEADER, "Iban"]
        mapping = map_columns(header)
        assert mapping.index_of("iban") == MEMBER_HEADER.index("Iban")

    def test_idempotent(self):
        first = map_columns(MEMBER_HEADER)
        second = map_columns(MEMBER_HEADER)
        assert dict(first.indices) == dict(second.indices)

    def test_nickname_table(self):
        mapping = map_columns(["Spitzname", "Name"], NICKNAME_TABLE)
        assert dict(mapping.indices) == {"name": 1, "nickname": 0}
