import datetime
import pathlib
import textwrap

import pytest
from green2 import (
    CONFIG_ENV,
    Config,
    DuplicatePolicy,
    Originator,
    OriginatorError,
    SequenceType,
)
from pytest_green2 import VALID_CREDITOR_ID, VALID_IBAN, make_originator


class Test_Originator:
    def test_valid(self):
        originator = make_originator()
        assert originator.is_valid()
        assert originator.check() is originator

    def test_normalization(self):
        originator = make_originator(
            iban="de02 1005 0000 0024 2906 61",
            bic="pbnk deff",
            creditor_id="DE98 ZZZ 09999999999",
        )
        assert originator.iban == VALID_IBAN
        assert originator.bic == "PBNKDEFF"
        assert originator.creditor_id == VALID_CREDITOR_ID
        assert originator.is_valid()

    @pytest.mark.parametrize(
        "changes,problem",
        [
            ({"creator": ""}, "creator is empty"),
            ({"creditor": "x" * 71}, "creditor exceeds 70 characters"),
            ({"iban": "DE00"}, "invalid IBAN 'DE00'"),
            ({"bic": "PBNK"}, "invalid BIC 'PBNK'"),
            ({"creditor_id": "DE00ZZZ1"}, "invalid creditor id 'DE00ZZZ1'"),
            ({"purpose": ""}, "purpose is empty"),
            ({"purpose": "x" * 141}, "purpose exceeds 140 characters"),
            ({"message_id": ""}, "invalid message id ''"),
            ({"message_id": "Beiträge"}, "invalid message id 'Beiträge'"),
            ({"pmt_inf_id": "x" * 36}, f"invalid payment information id {'x' * 36!r}"),
            ({"execution_date": None}, "execution date is missing"),
        ],
    )
    def test_problems(self, changes, problem):
        originator = make_originator(**changes)
        assert originator.problems() == [problem]
        with pytest.raises(OriginatorError) as exc_info:
            originator.check()
        assert exc_info.value.problems == (problem,)

    def test_execution_date_from_string(self):
        originator = make_originator(execution_date="01.03.2017")
        assert originator.execution_date == datetime.date(2017, 3, 1)

    def test_replace(self):
        originator = make_originator().replace(message_id="2017-03 Beitraege")
        assert originator.message_id == "2017-03 Beitraege"
        assert originator.creator == "Kassenwart Max Mustermann"

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "originator.yml"
        originator = make_originator(creditor="Musikverein Grünstadt e.V.")
        originator.save(path)
        assert "Grünstadt" in path.read_text(encoding="utf-8")
        assert Originator.from_file(path) == originator

    def test_from_file(self, tmp_path):
        path = tmp_path / "originator.yml"
        path.write_text(
            textwrap.dedent(
                f"""\
                creator: Kassenwart
                creditor: Musikverein
                iban: {VALID_IBAN}
                bic: PBNKDEFF
                creditor_id: {VALID_CREDITOR_ID}
                purpose: Mitgliedsbeitrag
                message_id: 2017-02 Beitraege
                pmt_inf_id: 2017-02 Beitraege
                execution_date: 2017-03-01
                """
            ),
            encoding="utf-8",
        )
        originator = Originator.from_file(path)
        assert originator.execution_date == datetime.date(2017, 3, 1)
        assert originator.is_valid()


class Test_Config:
    def test_defaults(self):
        config = Config()
        assert config.sepa_with_bom is True
        assert config.default_contribution_cents is None
        assert config.sequence_type == SequenceType.RECURRING
        assert config.duplicate_members == DuplicatePolicy.ERROR

    def test_from_dict(self):
        config = Config.from_dict(
            {
                "sepa_with_bom": "no",
                "default_contribution": "24,00",
                "sequence_type": "frst",
                "duplicate_members": "keep_last",
                "max_workers": "4",
            }
        )
        assert config.sepa_with_bom is False
        assert config.default_contribution_cents == 2400
        assert config.sequence_type == SequenceType.FIRST
        assert config.duplicate_members == DuplicatePolicy.KEEP_LAST
        assert config.max_workers == 4

    @pytest.mark.parametrize(
        "value,expected",
        [(True, True), ("True", True), ("1", True), (False, False), ("f", False)],
    )
    def test_bool(self, value, expected):
        assert Config.from_dict({"sepa_with_bom": value}).sepa_with_bom is expected

    def test_invalid_bool(self):
        with pytest.raises(ValueError):
            Config.from_dict({"sepa_with_bom": "maybe"})

    def test_invalid_contribution(self):
        with pytest.raises(ValueError, match="default_contribution"):
            Config.from_dict({"default_contribution": "12.345"})

    @pytest.mark.parametrize("value", ["0", "0,00", -5])
    def test_non_positive_contribution(self, value):
        with pytest.raises(ValueError, match="default_contribution"):
            Config.from_dict({"default_contribution": value})

    def test_yaml_float_contribution(self):
        assert Config.from_dict({"default_contribution": 12.5}).default_contribution_cents == 1250

    def test_from_file_with_originator(self, tmp_path):
        make_originator().save(tmp_path / "originator.yml")
        (tmp_path / "green2.yml").write_text(
            "originator_file: originator.yml\ndefault_contribution: 10\n",
            encoding="utf-8",
        )
        config = Config.from_file(tmp_path / "green2.yml")
        assert config.originator_file == tmp_path / "originator.yml"
        assert config.default_contribution_cents == 1000
        assert config.load_originator() == make_originator()

    def test_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yml"
        path.write_text("sepa_with_bom: false\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV, str(path))
        assert Config.from_file().sepa_with_bom is False

    def test_default_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV, raising=False)
        monkeypatch.chdir(tmp_path)
        pathlib.Path("green2.yml").write_text("max_workers: 2\n", encoding="utf-8")
        assert Config.from_file().max_workers == 2

    def test_empty_file(self, tmp_path):
        path = tmp_path / "green2.yml"
        path.write_text("", encoding="utf-8")
        assert Config.from_file(path) == Config()

    def test_no_originator_file(self):
        with pytest.raises(RuntimeError):
            Config().load_originator()
