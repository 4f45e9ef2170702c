import codecs
import datetime
import logging

import pytest
from green2 import (
    MEMBER_QUERY,
    Config,
    DuplicatePolicy,
    GroupingInputError,
    OriginatorError,
    PainMessage,
    SequenceType,
    all_of,
    generate_collection,
    generate_collection_from_source,
    is_active,
    negate,
    membership_number_in,
)
from pytest_green2 import (
    INVALID_IBAN,
    make_originator,
    make_query_result,
    member_row,
    parse_sdd_xml,
)


CREATED_AT = datetime.datetime(2017, 2, 20, 12, 0, 0)


def _query_result():
    return make_query_result(
        member_row(1, Vorname="Anna"),
        member_row(2, Vorname="Berta"),
        member_row(3, Vorname="Clara", Iban=INVALID_IBAN),
    )


def _generate(query_result=None, **kwargs):
    kwargs.setdefault("originator", make_originator())
    kwargs.setdefault("created_at", CREATED_AT)
    return generate_collection(
        _query_result() if query_result is None else query_result, **kwargs
    )


class Test_generate_collection:
    def test_collection(self):
        result = _generate()
        assert result.number_of_transactions == 2
        assert result.control_sum_cents == 2000
        assert [e.membership_number for e in result.excluded] == [3]
        assert result.members_total == 3
        assert result.members_selected == 3

        sdd = parse_sdd_xml(result.document[len(codecs.BOM_UTF8) :])
        assert sdd["nb_of_txs"] == 2
        assert sdd["ctrl_sum_cents"] == 2000
        assert len(sdd["pmt_inf_elts"]) == 1

    def test_summary(self):
        result = _generate()
        assert result.summary() == (
            f"1 of 3 members excluded, reasons: 3 (invalid IBAN {INVALID_IBAN!r})"
        )

    def test_summary_with_data_warnings(self):
        query_result = make_query_result(
            member_row(1), member_row(2, Geburtstag="31.02.2000")
        )
        result = _generate(query_result)
        assert result.summary() == "0 of 2 members excluded (1 data warnings)"
        assert result.warnings[0].column == "Geburtstag"

    def test_config(self):
        config = Config(
            sepa_with_bom=False,
            default_contribution_cents=1500,
            sequence_type=SequenceType.FIRST,
        )
        query_result = make_query_result(member_row(1, Beitrag=None), member_row(2))
        result = _generate(query_result, config=config)
        assert not result.document.startswith(codecs.BOM_UTF8)
        message = PainMessage.loads(result.document)
        assert [p.debit_sequence_type for p in message.payment_infos] == [
            "FRST",
            "FRST",
        ]
        assert [g.amount_cents for g in result.groups] == [1000, 1500]

    def test_unparseable_contribution_is_not_collected(self):
        query_result = make_query_result(
            member_row(1, Beitrag="12.345,00"),
            member_row(2),
            member_row(3, Beitrag=None),
        )
        config = Config(default_contribution_cents=2400)
        result = _generate(query_result, config=config)
        collected = {
            m.membership_number: g.amount_cents for g in result.groups for m in g.members
        }
        assert collected == {2: 1000, 3: 2400}
        assert [e.membership_number for e in result.excluded] == [1]
        assert result.excluded[0].reasons == ("no contribution",)
        assert result.warnings[0].column == "Beitrag"

    @pytest.mark.parametrize("cents", [0, -500])
    def test_non_positive_default_contribution(self, cents):
        config = Config(default_contribution_cents=cents)
        with pytest.raises(GroupingInputError):
            _generate(config=config)

    def test_duplicates_from_config(self):
        query_result = make_query_result(member_row(1), member_row(1))
        config = Config(duplicate_members=DuplicatePolicy.KEEP_FIRST)
        result = _generate(query_result, config=config)
        assert result.number_of_transactions == 1
        assert len(result.warnings) == 1

    def test_uniform_contribution(self):
        result = _generate(contribution_cents=2400)
        assert result.control_sum_cents == 4800

    def test_select(self):
        query_result = make_query_result(
            member_row(1), member_row(2, IstAktiv="0"), member_row(3)
        )
        result = _generate(
            query_result,
            select=all_of(is_active, negate(membership_number_in([3]))),
        )
        assert result.members_total == 3
        assert result.members_selected == 1
        assert [m.membership_number for m in result.selected_members] == [1]
        assert result.number_of_transactions == 1

    def test_invalid_originator(self):
        with pytest.raises(OriginatorError) as exc_info:
            _generate(originator=make_originator(iban=INVALID_IBAN, message_id=""))
        assert len(exc_info.value.problems) == 2

    def test_nobody_to_collect(self, caplog):
        query_result = make_query_result(member_row(1, IstBeitragsfrei="1"))
        with caplog.at_level(logging.WARNING):
            result = _generate(query_result)
        assert result.document is None
        assert result.groups == ()
        assert "No direct debit" in caplog.text

    def test_from_source(self):
        queries = []

        def source(query):
            queries.append(query)
            return _query_result()

        result = generate_collection_from_source(
            source, originator=make_originator(), created_at=CREATED_AT
        )
        assert queries == [MEMBER_QUERY]
        assert result.number_of_transactions == 2


class Test_CollectionResult:
    def test_to_dataframe(self):
        df = _generate().to_dataframe()
        assert list(df["membership_number"]) == [1, 2, 3]
        assert list(df["status"]) == ["ok", "ok", "skipped"]
        assert df["status_reason"].iloc[2].startswith("invalid IBAN")
        assert list(df["amount_cents"].iloc[:2]) == [1000, 1000]
        assert df["pmt_inf_id"].iloc[0] == "2017-02-02 Beitraege-1"
        assert df["account_holder"].iloc[0] == "Mustermann, Anna"

    def test_write_document(self, tmp_path):
        result = _generate()
        path = tmp_path / "sepa.xml"
        assert result.write_document(path) is True
        assert path.read_bytes() == result.document

    def test_write_document_without_document(self, tmp_path):
        query_result = make_query_result(member_row(1, Iban=""))
        result = _generate(query_result)
        path = tmp_path / "sepa.xml"
        assert result.write_document(path) is False
        assert not path.exists()

    def test_write_report_xlsx(self, tmp_path):
        import pandas as pd

        path = tmp_path / "sepa.xlsx"
        _generate().write_report_xlsx(path)
        df = pd.read_excel(path, sheet_name="Lastschrift")
        assert list(df["membership_number"]) == [1, 2, 3]
        assert list(df["status"]) == ["ok", "ok", "skipped"]

    def test_log_summary(self, caplog):
        logger = logging.getLogger("test_log_summary")
        with caplog.at_level(logging.INFO, logger="test_log_summary"):
            _generate().log_summary(logger)
        assert "Number of transactions: 2" in caplog.text
        assert "2017-02-02 Beitraege-1: 2 x" in caplog.text
