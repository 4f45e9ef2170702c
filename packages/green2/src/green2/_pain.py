from __future__ import annotations

import codecs as _codecs
import dataclasses as _dataclasses
import datetime as _datetime
import functools as _functools
import logging as _logging
import typing as _typing

from . import _types


if _typing.TYPE_CHECKING:
    import lxml.etree as _etree

    from . import _file, _grouping, _originator, _people


__all__ = [
    "PAIN_008_003_02",
    "PAIN_008_003_02_NAMESPACE",
    "PainDirectDebitTxInf",
    "PainMessage",
    "PainPaymentInformation",
    "assemble_document",
]


_LOGGER = _logging.getLogger(__name__)

PAIN_008_003_02 = "pain.008.003.02"
PAIN_008_003_02_NAMESPACE = f"urn:iso:std:iso:20022:tech:xsd:{PAIN_008_003_02}"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

NOT_PROVIDED = "NOTPROVIDED"
CURRENCY = "EUR"


# ==============================================================================
# Assembler
# ==============================================================================


class _Builder:
    def __init__(self) -> None:
        import lxml.etree

        self._etree = lxml.etree

    def sub(self, parent: _etree._Element, tag: str, text: str | None = None, **attrib):
        elt = self._etree.SubElement(parent, f"{{{PAIN_008_003_02_NAMESPACE}}}{tag}")
        elt.attrib.update(attrib)
        if text is not None:
            elt.text = text
        return elt

    def path(self, parent: _etree._Element, tags: str, text: str | None = None):
        """Create the nested elements *tags* (``/``-separated)."""
        elt = parent
        *inner, last = tags.split("/")
        for tag in inner:
            elt = self.sub(elt, tag)
        return self.sub(elt, last, text)


def _sepa_text(s: str, max_length: int) -> str:
    from . import _util

    return _util.sepa_transliterate(s)[:max_length].rstrip()


def _add_fin_instn_id(b: _Builder, parent: _etree._Element, bic: str) -> None:
    fin_instn_id = b.sub(parent, "FinInstnId")
    if bic:
        b.sub(fin_instn_id, "BIC", bic)
    else:
        b.path(fin_instn_id, "Othr/Id", NOT_PROVIDED)


def _add_group_header(
    b: _Builder,
    parent: _etree._Element,
    originator: _originator.Originator,
    groups: _typing.Sequence[_grouping.PaymentGroup],
    created_at: _datetime.datetime,
) -> None:
    from . import _identifiers, _util

    grp_hdr = b.sub(parent, "GrpHdr")
    b.sub(grp_hdr, "MsgId", originator.message_id)
    b.sub(grp_hdr, "CreDtTm", _identifiers.format_sepa_date(created_at))
    b.sub(grp_hdr, "NbOfTxs", str(sum(g.number_of_transactions for g in groups)))
    b.sub(grp_hdr, "CtrlSum", _util.format_cents(sum(g.control_sum_cents for g in groups)))
    b.path(
        grp_hdr,
        "InitgPty/Nm",
        _sepa_text(originator.creator, _identifiers.MAX_CHAR_NAME),
    )


def _add_transaction(
    b: _Builder,
    parent: _etree._Element,
    member: _people.Member,
    group: _grouping.PaymentGroup,
    *,
    purpose: str,
) -> None:
    from . import _identifiers, _util

    holder = member.account_holder
    tx = b.sub(parent, "DrctDbtTxInf")
    b.path(tx, "PmtId/EndToEndId", NOT_PROVIDED)
    b.sub(tx, "InstdAmt", _util.format_cents(group.amount_cents), Ccy=CURRENCY)
    mndt = b.path(tx, "DrctDbtTx/MndtRltdInf")
    b.sub(mndt, "MndtId", str(member.membership_number))
    b.sub(mndt, "DtOfSgntr", _identifiers.format_sepa_date(holder.mandate_signed))
    b.sub(mndt, "AmdmntInd", "true" if holder.mandate_changed else "false")
    _add_fin_instn_id(b, b.sub(tx, "DbtrAgt"), holder.bic)
    b.path(
        tx,
        "Dbtr/Nm",
        _sepa_text(member.account_holder_name, _identifiers.MAX_CHAR_NAME),
    )
    b.path(tx, "DbtrAcct/Id/IBAN", _identifiers.normalize_iban(holder.iban))
    b.path(tx, "RmtInf/Ustrd", _sepa_text(purpose, _identifiers.MAX_CHAR_PURPOSE))


def _add_payment_information(
    b: _Builder,
    parent: _etree._Element,
    originator: _originator.Originator,
    group: _grouping.PaymentGroup,
    *,
    sequence_type: _types.SequenceType,
) -> None:
    from . import _identifiers, _util

    pmt_inf = b.sub(parent, "PmtInf")
    b.sub(pmt_inf, "PmtInfId", group.pmt_inf_id)
    b.sub(pmt_inf, "PmtMtd", "DD")
    b.sub(pmt_inf, "BtchBookg", "true")
    b.sub(pmt_inf, "NbOfTxs", str(group.number_of_transactions))
    b.sub(pmt_inf, "CtrlSum", _util.format_cents(group.control_sum_cents))
    pmt_tp_inf = b.sub(pmt_inf, "PmtTpInf")
    b.path(pmt_tp_inf, "SvcLvl/Cd", "SEPA")
    b.path(pmt_tp_inf, "LclInstrm/Cd", "CORE")
    b.sub(pmt_tp_inf, "SeqTp", str(sequence_type))
    b.sub(
        pmt_inf,
        "ReqdColltnDt",
        _identifiers.format_sepa_date(originator.execution_date),
    )
    b.path(
        pmt_inf, "Cdtr/Nm", _sepa_text(originator.creditor, _identifiers.MAX_CHAR_NAME)
    )
    b.path(pmt_inf, "CdtrAcct/Id/IBAN", originator.iban)
    _add_fin_instn_id(b, b.sub(pmt_inf, "CdtrAgt"), originator.bic)
    b.sub(pmt_inf, "ChrgBr", "SLEV")
    othr = b.path(pmt_inf, "CdtrSchmeId/Id/PrvtId/Othr")
    b.sub(othr, "Id", originator.creditor_id)
    b.path(othr, "SchmeNm/Prtry", "SEPA")

    for member in group.members:
        purpose = _render_purpose(originator, member, group)
        _add_transaction(b, pmt_inf, member, group, purpose=purpose)


def _render_purpose(
    originator: _originator.Originator,
    member: _people.Member,
    group: _grouping.PaymentGroup,
) -> str:
    from . import _util

    if "{" not in originator.purpose:
        return originator.purpose
    return _util.render_template(
        originator.purpose,
        {
            "member": member,
            "originator": originator,
            "amount": _util.format_cents(group.amount_cents),
        },
    )


def assemble_document(
    originator: _originator.Originator,
    groups: _typing.Sequence[_grouping.PaymentGroup],
    *,
    created_at: _datetime.datetime,
    sequence_type: _types.SequenceType | str = _types.SequenceType.RECURRING,
    with_bom: bool = True,
    pretty_print: bool = True,
) -> bytes:
    """Render *groups* as a pain.008.003.02 direct debit initiation.

    Every group becomes one ``PmtInf`` block and every member of a
    group one ``DrctDbtTxInf``.  The purpose of *originator* may be a
    Jinja2 template using ``member``, ``originator`` and ``amount``.

    The document is UTF-8 encoded; *with_bom* only prepends the byte
    order mark.
    """
    import lxml.etree

    if not groups:
        raise ValueError("Cannot assemble a direct debit without payment groups")
    sequence_type = _types.SequenceType(sequence_type)

    b = _Builder()
    nsmap = {None: PAIN_008_003_02_NAMESPACE, "xsi": XSI_NAMESPACE}
    document = lxml.etree.Element(
        f"{{{PAIN_008_003_02_NAMESPACE}}}Document", nsmap=nsmap
    )
    document.set(
        f"{{{XSI_NAMESPACE}}}schemaLocation",
        f"{PAIN_008_003_02_NAMESPACE} {PAIN_008_003_02}.xsd",
    )
    initn = b.sub(document, "CstmrDrctDbtInitn")
    _add_group_header(b, initn, originator, groups, created_at)
    for group in groups:
        _add_payment_information(
            b, initn, originator, group, sequence_type=sequence_type
        )

    content = lxml.etree.tostring(
        document, xml_declaration=True, encoding="UTF-8", pretty_print=pretty_print
    )
    _LOGGER.debug(
        "[pain] Assembled %s with %s payment information blocks (%s bytes)",
        originator.message_id,
        len(groups),
        len(content),
    )
    return (_codecs.BOM_UTF8 + content) if with_bom else content


# ==============================================================================
# Reader
# ==============================================================================


@_dataclasses.dataclass(kw_only=True)
class PainDirectDebitTxInf:
    DrctDbtTxInf: dict = _dataclasses.field(repr=False)

    @property
    def _Amt(self) -> dict:
        return self.DrctDbtTxInf["InstdAmt"]

    @property
    def _MndtRltdInf(self) -> dict:
        return self.DrctDbtTxInf["DrctDbtTx"]["MndtRltdInf"]

    @property
    def endtoend_id(self) -> str:
        return self.DrctDbtTxInf["PmtId"]["EndToEndId"]

    @_functools.cached_property
    def amount_cents(self) -> int:
        from . import _iso20022

        return _iso20022.amount_string_to_cents(self._Amt["amt"])

    @property
    def amount_currency(self) -> str:
        return self._Amt["Ccy"]

    @property
    def mandate_id(self) -> str:
        return self._MndtRltdInf["MndtId"]

    @property
    def mandate_date(self) -> _datetime.date:
        return _datetime.date.fromisoformat(self._MndtRltdInf["DtOfSgntr"])

    @property
    def dbtr_name(self) -> str:
        return self.DrctDbtTxInf["Dbtr"]["Nm"]

    @property
    def dbtr_iban(self) -> str:
        return self.DrctDbtTxInf["DbtrAcct"]["Id"]["IBAN"]

    @property
    def dbtr_bic(self) -> str | None:
        return self.DrctDbtTxInf["DbtrAgt"]["FinInstnId"].get("BIC")

    @property
    def description(self) -> str:
        return self.DrctDbtTxInf.get("RmtInf", {}).get("Ustrd", "")


@_dataclasses.dataclass(kw_only=True)
class PainPaymentInformation:
    PmtInf: dict = _dataclasses.field(repr=False)

    @property
    def PmtTpInf(self) -> dict:
        return self.PmtInf["PmtTpInf"]

    @property
    def payment_information_identification(self) -> str:
        return self.PmtInf.get("PmtInfId", "")

    @property
    def batch_booking(self) -> bool:
        return self.PmtInf.get("BtchBookg", "true") == "true"

    @property
    def number_of_transactions(self) -> int:
        return int(self.PmtInf["NbOfTxs"], base=10)

    @property
    def control_sum_cents(self) -> int:
        from . import _iso20022

        return _iso20022.amount_string_to_cents(self.PmtInf["CtrlSum"])

    @property
    def payment_type_instrument(self) -> str:
        return self.PmtTpInf["LclInstrm"]["Cd"]

    @property
    def debit_sequence_type(self) -> str:
        return self.PmtTpInf["SeqTp"]

    @property
    def requested_collection_date(self) -> _datetime.date | None:
        from . import _util

        return _util.to_date_or_none(self.PmtInf.get("ReqdColltnDt"))

    @property
    def cdtr_name(self) -> str:
        return self.PmtInf["Cdtr"]["Nm"]

    @property
    def cdtr_iban(self) -> str:
        return self.PmtInf["CdtrAcct"]["Id"]["IBAN"]

    @property
    def cdtr_bic(self) -> str | None:
        return self.PmtInf["CdtrAgt"]["FinInstnId"].get("BIC")

    @property
    def creditor_id(self) -> str | None:
        return (
            self.PmtInf.get("CdtrSchmeId", {})
            .get("Id", {})
            .get("PrvtId", {})
            .get("Othr", {})
            .get("Id")
        )

    @_functools.cached_property
    def direct_debit_tx_infs(self) -> list[PainDirectDebitTxInf]:
        from . import _iso20022

        txs = _iso20022.element_or_list_to_list(self.PmtInf.get("DrctDbtTxInf"))
        return [PainDirectDebitTxInf(DrctDbtTxInf=d) for d in txs]


@_dataclasses.dataclass(kw_only=True)
class PainMessage:
    """Read access to a pain.008 direct debit initiation."""

    sepa_schema: str
    Document: dict = _dataclasses.field(repr=False)

    @classmethod
    def load(cls, file_or_path: _file.PathLike | _typing.BinaryIO, /) -> _typing.Self:
        from . import _iso20022

        d = _iso20022.iso20022_xml_file_to_dict(file_or_path, expected_format="pain.008")
        return cls(sepa_schema=d["sepa_schema"], Document=d["Document"])

    @classmethod
    def loads(cls, content: bytes, /) -> _typing.Self:
        from . import _iso20022

        d = _iso20022.iso20022_xml_bytes_to_dict(content, expected_format="pain.008")
        return cls(sepa_schema=d["sepa_schema"], Document=d["Document"])

    @property
    def _root(self) -> dict:
        return self.Document["CstmrDrctDbtInitn"]

    @property
    def GrpHdr(self) -> dict:
        return self._root["GrpHdr"]

    @property
    def message_identification(self) -> str:
        return self.GrpHdr["MsgId"]

    @property
    def creation_date_time(self) -> _datetime.datetime:
        return _datetime.datetime.fromisoformat(self.GrpHdr["CreDtTm"])

    @property
    def number_of_transactions(self) -> int:
        return int(self.GrpHdr["NbOfTxs"], base=10)

    @property
    def control_sum_cents(self) -> int:
        from . import _iso20022

        return _iso20022.amount_string_to_cents(self.GrpHdr["CtrlSum"])

    @property
    def initiating_party_name(self) -> str:
        return self.GrpHdr.get("InitgPty", {}).get("Nm", "")

    @_functools.cached_property
    def payment_infos(self) -> list[PainPaymentInformation]:
        from . import _iso20022

        pmt_infs = _iso20022.element_or_list_to_list(self._root.get("PmtInf"))
        return [PainPaymentInformation(PmtInf=d) for d in pmt_infs]

    @property
    def direct_debit_tx_infs(self) -> list[PainDirectDebitTxInf]:
        return [tx for p in self.payment_infos for tx in p.direct_debit_tx_infs]

    def consistency_problems(self) -> list[str]:
        """Compare the declared counts and control sums with the transactions."""
        problems = []
        for p in self.payment_infos:
            txs = p.direct_debit_tx_infs
            if p.number_of_transactions != len(txs):
                problems.append(
                    f"{p.payment_information_identification}: NbOfTxs="
                    f"{p.number_of_transactions}, found {len(txs)} transactions"
                )
            if p.control_sum_cents != sum(tx.amount_cents for tx in txs):
                problems.append(
                    f"{p.payment_information_identification}: CtrlSum does not match"
                )
        txs = self.direct_debit_tx_infs
        if self.number_of_transactions != len(txs):
            problems.append(
                f"GrpHdr: NbOfTxs={self.number_of_transactions}, "
                f"found {len(txs)} transactions"
            )
        if self.control_sum_cents != sum(tx.amount_cents for tx in txs):
            problems.append("GrpHdr: CtrlSum does not match")
        return problems
