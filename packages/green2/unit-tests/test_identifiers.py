import datetime

import pytest
from green2 import (
    format_sepa_date,
    is_valid_bic,
    is_valid_creditor_id,
    is_valid_iban,
    is_valid_message_id,
    is_valid_pmt_inf_id,
    parse_sepa_date,
)
from pytest_green2 import (
    INVALID_IBAN,
    VALID_CREDITOR_ID,
    VALID_IBAN,
    VALID_MESSAGE_ID,
)


@pytest.mark.parametrize(
    "iban,expected",
    [
        (VALID_IBAN, True),
        ("DE02 1005 0000 0024 2906 61", True),
        ("DE89370400440532013000", True),
        (INVALID_IBAN, False),
        ("DE03100500000024290661", False),
        ("de02100500000024290661", False),
        ("DE0", False),
        ("DE02", False),
        ("", False),
        ("   ", False),
        (None, False),
        (12345, False),
    ],
)
def test_is_valid_iban(iban, expected):
    assert is_valid_iban(iban) is expected


@pytest.mark.parametrize(
    "creditor_id,expected",
    [
        (VALID_CREDITOR_ID, True),
        ("DE98 ZZZ 09999999999", True),
        (VALID_IBAN, False),
        ("DE99ZZZ09999999999", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_creditor_id(creditor_id, expected):
    assert is_valid_creditor_id(creditor_id) is expected


@pytest.mark.parametrize(
    "bic,expected",
    [
        ("PBNKDEFF", True),
        ("PBNKDEFFXXX", True),
        ("GENODE51KS1", True),
        ("PBNKDEF", False),
        ("PBNKDEFFXX", False),
        ("pbnkdeff", False),
        (None, False),
    ],
)
def test_is_valid_bic(bic, expected):
    assert is_valid_bic(bic) is expected


class Test_is_valid_message_id:
    def test_valid(self):
        assert is_valid_message_id(VALID_MESSAGE_ID)

    def test_all_allowed_characters(self):
        assert is_valid_message_id("aZ09/ -?:().,'+")

    def test_max_length(self):
        assert is_valid_message_id("x" * 35)
        assert not is_valid_message_id("x" * 36)

    @pytest.mark.parametrize("message_id", ["Beiträge", "a_b", "a&b", "a\nb", None])
    def test_invalid(self, message_id):
        assert not is_valid_message_id(message_id)

    def test_pmt_inf_id_same_rules(self):
        assert is_valid_pmt_inf_id("2017-02-02 Beitraege-1")
        assert not is_valid_pmt_inf_id("x" * 36)


class Test_format_sepa_date:
    def test_datetime(self):
        dt = datetime.datetime(2017, 2, 20, 12, 0, 0)
        assert format_sepa_date(dt) == "2017-02-20T12:00:00"

    def test_round_trip(self):
        dt = datetime.datetime(2017, 2, 20, 8, 5, 9)
        assert parse_sepa_date(format_sepa_date(dt)) == dt

    def test_aware_datetime_uses_local_fields(self):
        tz = datetime.timezone(datetime.timedelta(hours=1))
        dt = datetime.datetime(2017, 2, 20, 12, 0, 0, tzinfo=tz)
        assert format_sepa_date(dt) == "2017-02-20T12:00:00"

    def test_date(self):
        assert format_sepa_date(datetime.date(2017, 2, 20)) == "2017-02-20"

    def test_none(self):
        assert format_sepa_date(None) == ""
