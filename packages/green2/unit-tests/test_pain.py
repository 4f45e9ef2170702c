import codecs
import datetime

import pytest
from green2 import (
    PainMessage,
    SequenceType,
    assemble_document,
    group_members,
    load_members,
)
from pytest_green2 import (
    INVALID_IBAN,
    VALID_CREDITOR_ID,
    VALID_IBAN,
    VALID_MESSAGE_ID,
    make_originator,
    make_query_result,
    member_row,
    parse_sdd_xml,
)


CREATED_AT = datetime.datetime(2017, 2, 20, 12, 0, 0)


def _grouping(*rows, pmt_inf_id="2017-02-02 Beitraege", **kwargs):
    members = load_members(make_query_result(*rows)).members
    return group_members(members, pmt_inf_id=pmt_inf_id, **kwargs)


def _assemble(grouping, originator=None, **kwargs):
    if originator is None:
        originator = make_originator()
    kwargs.setdefault("created_at", CREATED_AT)
    return assemble_document(originator, grouping.groups, **kwargs)


def test_two_valid_one_invalid_iban():
    grouping = _grouping(
        member_row(1, Vorname="Anna"),
        member_row(2, Vorname="Berta"),
        member_row(3, Vorname="Clara", Iban=INVALID_IBAN),
    )
    content = _assemble(grouping)
    sdd = parse_sdd_xml(content[len(codecs.BOM_UTF8) :])

    assert len(sdd["pmt_inf_elts"]) == 1
    assert sdd["nb_of_txs"] == 2
    assert sdd["ctrl_sum_elt"].text == "20.00"
    assert sdd["ctrl_sum_cents"] == 2000
    assert sdd["mndt_ids"] == ["1", "2"]
    assert grouping.excluded_membership_numbers == [3]


class Test_assemble_document:
    def test_bom(self):
        grouping = _grouping(member_row(1))
        with_bom = _assemble(grouping, with_bom=True)
        without_bom = _assemble(grouping, with_bom=False)
        assert with_bom.startswith(codecs.BOM_UTF8)
        assert not without_bom.startswith(codecs.BOM_UTF8)
        assert with_bom[len(codecs.BOM_UTF8) :] == without_bom

    def test_xml_declaration(self):
        content = _assemble(_grouping(member_row(1)), with_bom=False)
        assert content.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")

    def test_empty_groups(self):
        with pytest.raises(ValueError):
            assemble_document(make_originator(), [], created_at=CREATED_AT)

    def test_group_header(self):
        content = _assemble(_grouping(member_row(1), member_row(2)), with_bom=False)
        message = PainMessage.loads(content)
        assert message.sepa_schema == "pain.008.003.02"
        assert message.message_identification == VALID_MESSAGE_ID
        assert message.creation_date_time == CREATED_AT
        assert message.number_of_transactions == 2
        assert message.control_sum_cents == 2000
        assert message.initiating_party_name == "Kassenwart Max Mustermann"
        assert message.consistency_problems() == []

    def test_payment_information(self):
        grouping = _grouping(member_row(1), member_row(2, Beitrag="24"))
        content = _assemble(grouping, sequence_type="FRST", with_bom=False)
        message = PainMessage.loads(content)
        assert [p.payment_information_identification for p in message.payment_infos] == [
            "2017-02-02 Beitraege-1",
            "2017-02-02 Beitraege-2",
        ]
        pmt_inf = message.payment_infos[1]
        assert pmt_inf.batch_booking is True
        assert pmt_inf.number_of_transactions == 1
        assert pmt_inf.control_sum_cents == 2400
        assert pmt_inf.payment_type_instrument == "CORE"
        assert pmt_inf.debit_sequence_type == "FRST"
        assert pmt_inf.requested_collection_date == datetime.date(2017, 3, 1)
        assert pmt_inf.cdtr_name == "Musikverein Gruenstadt e.V."
        assert pmt_inf.cdtr_iban == VALID_IBAN
        assert pmt_inf.cdtr_bic == "PBNKDEFF"
        assert pmt_inf.creditor_id == VALID_CREDITOR_ID

    @pytest.mark.parametrize("sequence_type", list(SequenceType))
    def test_sequence_types(self, sequence_type):
        content = _assemble(
            _grouping(member_row(1)), sequence_type=sequence_type, with_bom=False
        )
        (pmt_inf,) = PainMessage.loads(content).payment_infos
        assert pmt_inf.debit_sequence_type == sequence_type.value

    def test_invalid_sequence_type(self):
        with pytest.raises(ValueError):
            _assemble(_grouping(member_row(1)), sequence_type="XXXX")

    def test_transaction(self):
        grouping = _grouping(
            member_row(
                7,
                KontoinhaberVorname="Hans",
                KontoinhaberNachname="Müller",
                Bic="GENODE51KS1",
                Iban="DE02 1005 0000 0024 2906 61",
            )
        )
        content = _assemble(grouping, with_bom=False)
        (tx,) = PainMessage.loads(content).direct_debit_tx_infs
        assert tx.endtoend_id == "NOTPROVIDED"
        assert tx.amount_cents == 1000
        assert tx.amount_currency == "EUR"
        assert tx.mandate_id == "7"
        assert tx.mandate_date == datetime.date(2016, 1, 15)
        assert tx.dbtr_name == "Mueller, Hans"
        assert tx.dbtr_iban == VALID_IBAN
        assert tx.dbtr_bic == "GENODE51KS1"
        assert tx.description == "Mitgliedsbeitrag 2017"

    def test_missing_bic_is_not_provided(self):
        content = _assemble(_grouping(member_row(1, Bic="")), with_bom=False)
        sdd = parse_sdd_xml(content)
        othr_ids = sdd["etree"].xpath(
            "//sepa:DrctDbtTxInf/sepa:DbtrAgt/sepa:FinInstnId/sepa:Othr/sepa:Id",
            namespaces=sdd["ns"],
        )
        assert [e.text for e in othr_ids] == ["NOTPROVIDED"]
        (tx,) = PainMessage.loads(content).direct_debit_tx_infs
        assert tx.dbtr_bic is None

    def test_amended_mandate(self):
        from green2 import MEMBER_TABLE

        header = [c.label for c in MEMBER_TABLE]
        row = member_row(1, header=header, MandatGeaendert="1")
        members = load_members(make_query_result(row, header=header)).members
        grouping = group_members(members, pmt_inf_id="Beitraege")
        sdd = parse_sdd_xml(_assemble(grouping, with_bom=False))
        (amdmnt_ind,) = sdd["etree"].xpath("//sepa:AmdmntInd", namespaces=sdd["ns"])
        assert amdmnt_ind.text == "true"

    def test_purpose_template(self):
        originator = make_originator(
            purpose="Beitrag {{ amount }} EUR Nr. {{ member.membership_number }}"
        )
        content = _assemble(_grouping(member_row(42)), originator, with_bom=False)
        (tx,) = PainMessage.loads(content).direct_debit_tx_infs
        assert tx.description == "Beitrag 10.00 EUR Nr. 42"

    def test_names_restricted_to_sepa_characters(self):
        grouping = _grouping(
            member_row(
                1, KontoinhaberVorname="Søren", KontoinhaberNachname="Dupré & Co"
            )
        )
        originator = make_originator(
            creditor="Musikverein Grünstadt e.V.", purpose="Beitrag 2017 – Jugend"
        )
        content = _assemble(grouping, originator, with_bom=False)
        (tx,) = PainMessage.loads(content).direct_debit_tx_infs
        assert tx.dbtr_name == "Dupre + Co, Soren"
        assert tx.description == "Beitrag 2017 Jugend"
        sdd = parse_sdd_xml(content)
        (cdtr_nm,) = sdd["etree"].xpath("//sepa:Cdtr/sepa:Nm", namespaces=sdd["ns"])
        assert cdtr_nm.text == "Musikverein Gruenstadt e.V."

    def test_long_names_are_truncated(self):
        grouping = _grouping(member_row(1, Nachname="X" * 80))
        content = _assemble(grouping, with_bom=False)
        (tx,) = PainMessage.loads(content).direct_debit_tx_infs
        assert len(tx.dbtr_name) == 70

    def test_control_sum_over_groups(self):
        grouping = _grouping(
            member_row(1, Beitrag="5"),
            member_row(2, Beitrag="12.34"),
            member_row(3, Beitrag="12,34"),
        )
        content = _assemble(grouping, with_bom=False)
        message = PainMessage.loads(content)
        assert message.control_sum_cents == 500 + 2 * 1234
        assert sum(p.control_sum_cents for p in message.payment_infos) == 2968
        assert message.consistency_problems() == []


class Test_PainMessage:
    def test_load_file(self, tmp_path):
        content = _assemble(_grouping(member_row(1)))
        path = tmp_path / "sepa.xml"
        path.write_bytes(content)
        message = PainMessage.load(path)
        assert message.number_of_transactions == 1

    def test_wrong_format(self):
        content = (
            b'<Document xmlns="urn:iso:std:iso:20022:tech:xsd:pain.001.001.03">'
            b"</Document>"
        )
        with pytest.raises(RuntimeError):
            PainMessage.loads(content)

    def test_consistency_problems(self):
        content = _assemble(_grouping(member_row(1), member_row(2)), with_bom=False)
        content = content.replace(b"<NbOfTxs>2</NbOfTxs>", b"<NbOfTxs>3</NbOfTxs>", 1)
        message = PainMessage.loads(content)
        assert message.consistency_problems() == [
            "GrpHdr: NbOfTxs=3, found 2 transactions"
        ]
