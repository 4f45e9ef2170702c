"""Validation of SEPA identifiers.

All predicates are total: invalid input (including `None` and
non-strings) yields `False`, never an exception.
"""

from __future__ import annotations

import datetime as _datetime
import re as _re
import typing as _typing


__all__ = [
    "MAX_CHAR_IBAN",
    "MAX_CHAR_MESSAGE_ID",
    "MAX_CHAR_NAME",
    "MAX_CHAR_PMT_INF_ID",
    "MAX_CHAR_PURPOSE",
    "SEPA_BUSINESS_CODE",
    "UNIQUE_DAYS_MESSAGE_ID",
    "UNIQUE_MONTHS_PMT_INF_ID",
    "format_sepa_date",
    "is_valid_bic",
    "is_valid_creditor_id",
    "is_valid_iban",
    "is_valid_message_id",
    "is_valid_pmt_inf_id",
    "normalize_iban",
    "parse_sepa_date",
]


#: A message id must not be reused within this many days.
UNIQUE_DAYS_MESSAGE_ID = 15
#: A payment information id must not be reused within this many months.
UNIQUE_MONTHS_PMT_INF_ID = 3

MAX_CHAR_MESSAGE_ID = 35
MAX_CHAR_PMT_INF_ID = 35
MAX_CHAR_IBAN = 34
MAX_CHAR_NAME = 70
MAX_CHAR_PURPOSE = 140

SEPA_BUSINESS_CODE = "ZZZ"

_IBAN_RE = _re.compile(r"[A-Z]{2}\d{2,32}")
_BIC_RE = _re.compile(r"[A-Z0-9]{8}([A-Z0-9]{3})?")
_MESSAGE_ID_RE = _re.compile(r"[a-zA-Z0-9/ \-?:().,'+]*")


def normalize_iban(iban: str) -> str:
    """Remove spaces and convert to upper case.

    >>> normalize_iban("de02 1005 0000 0024 2906 61")
    'DE02100500000024290661'
    """
    return iban.replace(" ", "").upper()


def is_valid_iban(iban: _typing.Any) -> bool:
    """Check the format and mod-97 checksum of *iban*.

    >>> is_valid_iban("DE02100500000024290661")
    True
    >>> is_valid_iban("DE02 1005 0000 0024 2906 61")
    True
    >>> is_valid_iban("DE021005000000w24290661")
    False
    >>> is_valid_iban(None)
    False
    """
    if not isinstance(iban, str) or not iban:
        return False
    iban = iban.replace(" ", "")
    if not 5 <= len(iban) <= MAX_CHAR_IBAN or not _IBAN_RE.fullmatch(iban):
        return False
    country_digits = "".join(str(ord(c) - ord("A") + 10) for c in iban[:2])
    rearranged = iban[4:] + country_digits + iban[2:4]
    return int(rearranged) % 97 == 1


def is_valid_creditor_id(creditor_id: _typing.Any) -> bool:
    """Check a SEPA creditor identifier.

    >>> is_valid_creditor_id("DE98ZZZ09999999999")
    True
    >>> is_valid_creditor_id("DE02100500000024290661")
    False
    """
    if not isinstance(creditor_id, str):
        return False
    creditor_id = creditor_id.replace(" ", "")
    if SEPA_BUSINESS_CODE not in creditor_id:
        return False
    return is_valid_iban(creditor_id.replace(SEPA_BUSINESS_CODE, ""))


def is_valid_bic(bic: _typing.Any) -> bool:
    """
    >>> is_valid_bic("PBNKDEFF")
    True
    >>> is_valid_bic("PBNKDEFFXXX")
    True
    >>> is_valid_bic("PBNKDEF")
    False
    """
    return isinstance(bic, str) and _BIC_RE.fullmatch(bic) is not None


def _is_valid_sepa_id(value: _typing.Any, max_length: int) -> bool:
    return (
        isinstance(value, str)
        and len(value) <= max_length
        and _MESSAGE_ID_RE.fullmatch(value) is not None
    )


def is_valid_message_id(message_id: _typing.Any) -> bool:
    """
    >>> is_valid_message_id("2017-02-02 Membercontributions")
    True
    >>> is_valid_message_id("x" * 36)
    False
    >>> is_valid_message_id("Beiträge")
    False
    """
    return _is_valid_sepa_id(message_id, MAX_CHAR_MESSAGE_ID)


def is_valid_pmt_inf_id(pmt_inf_id: _typing.Any) -> bool:
    return _is_valid_sepa_id(pmt_inf_id, MAX_CHAR_PMT_INF_ID)


def format_sepa_date(value: _datetime.date | _datetime.datetime | None) -> str:
    """Format *value* as expected by pain.008.

    >>> import datetime
    >>> format_sepa_date(datetime.datetime(2017, 2, 20, 12, 0))
    '2017-02-20T12:00:00'
    >>> format_sepa_date(datetime.date(2017, 2, 20))
    '2017-02-20'
    >>> format_sepa_date(None)
    ''
    """
    if isinstance(value, _datetime.datetime):
        return value.replace(tzinfo=None).isoformat(timespec="seconds")
    elif isinstance(value, _datetime.date):
        return value.isoformat()
    else:
        return ""


def parse_sepa_date(value: str) -> _datetime.datetime:
    """Inverse of :obj:`format_sepa_date` for date-times.

    >>> parse_sepa_date("2017-02-20T12:00:00")
    datetime.datetime(2017, 2, 20, 12, 0)
    """
    return _datetime.datetime.fromisoformat(value)
