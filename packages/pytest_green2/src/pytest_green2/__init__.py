from __future__ import annotations

import datetime as _datetime
import logging as _logging
import os as _os
import pathlib as _pathlib


_LOGGER = _logging.getLogger(__name__)

VALID_IBAN = "DE02100500000024290661"
INVALID_IBAN = "DE021005000000w24290661"
VALID_CREDITOR_ID = "DE98ZZZ09999999999"
VALID_MESSAGE_ID = "2017-02-02 Membercontributions"

MEMBER_HEADER = [
    "Mitgliedsnummer",
    "Vorname",
    "Nachname",
    "Titel",
    "IstMaennlich",
    "Geburtstag",
    "Strasse",
    "Hausnummer",
    "PLZ",
    "Ort",
    "IstAktiv",
    "IstBeitragsfrei",
    "Iban",
    "Bic",
    "KontoinhaberVorname",
    "KontoinhaberNachname",
    "MandatErstellt",
    "Beitrag",
]

_DEFAULT_ROW = {
    "Vorname": "Erika",
    "Nachname": "Mustermann",
    "Titel": "",
    "IstMaennlich": "0",
    "Geburtstag": "1970-01-01",
    "Strasse": "Heidestr.",
    "Hausnummer": "17",
    "PLZ": "51147",
    "Ort": "Koeln",
    "IstAktiv": "1",
    "IstBeitragsfrei": "0",
    "Iban": VALID_IBAN,
    "Bic": "",
    "KontoinhaberVorname": None,
    "KontoinhaberNachname": None,
    "MandatErstellt": "2016-01-15",
    "Beitrag": "10.00",
}


def member_row(
    membership_number: int | str, *, header: list[str] | None = None, **cells
) -> list[str | None]:
    """Return a ``Mitglieder`` row; *cells* override the default values."""
    if header is None:
        header = MEMBER_HEADER
    values = {**_DEFAULT_ROW, "Mitgliedsnummer": str(membership_number), **cells}
    return [values.get(label) for label in header]


def make_query_result(
    *rows: list[str | None], header: list[str] | None = None
) -> list[list[str | None]]:
    return [list(MEMBER_HEADER if header is None else header), *rows]


def make_originator(**changes):
    from green2 import Originator

    d = {
        "creator": "Kassenwart Max Mustermann",
        "creditor": "Musikverein Gruenstadt e.V.",
        "iban": VALID_IBAN,
        "bic": "PBNKDEFF",
        "creditor_id": VALID_CREDITOR_ID,
        "purpose": "Mitgliedsbeitrag 2017",
        "message_id": VALID_MESSAGE_ID,
        "pmt_inf_id": "2017-02-02 Beitraege",
        "execution_date": _datetime.date(2017, 3, 1),
    }
    d.update(changes)
    return Originator.from_dict(d)


def parse_sdd_xml(filename_or_content: _pathlib.Path | str | bytes) -> dict:
    """Parse a pain.008.003.02 file (or its content) for assertions."""
    import lxml.etree

    if isinstance(filename_or_content, bytes):
        x = lxml.etree.fromstring(filename_or_content)
    else:
        with open(_os.fspath(filename_or_content), "rb") as f:
            x = lxml.etree.parse(f).getroot()

    ns = {"sepa": "urn:iso:std:iso:20022:tech:xsd:pain.008.003.02"}
    grp_hdr_elt = x.xpath(
        "/sepa:Document/sepa:CstmrDrctDbtInitn/sepa:GrpHdr", namespaces=ns
    )[0]
    ctrl_sum_elt = grp_hdr_elt.xpath("sepa:CtrlSum", namespaces=ns)[0]
    ctrl_sum_cents = round(float(ctrl_sum_elt.text) * 100)
    pmt_inf_elts = x.xpath(
        "/sepa:Document/sepa:CstmrDrctDbtInitn/sepa:PmtInf", namespaces=ns
    )

    return {
        "etree": x,
        "ns": ns,
        "grp_hdr_elt": grp_hdr_elt,
        "ctrl_sum_elt": ctrl_sum_elt,
        "ctrl_sum_cents": ctrl_sum_cents,
        "nb_of_txs": int(grp_hdr_elt.xpath("sepa:NbOfTxs", namespaces=ns)[0].text),
        "pmt_inf_elts": pmt_inf_elts,
        "mndt_ids": [
            e.text
            for e in x.xpath(
                "//sepa:DrctDbtTxInf/sepa:DrctDbtTx/sepa:MndtRltdInf/sepa:MndtId",
                namespaces=ns,
            )
        ],
    }
