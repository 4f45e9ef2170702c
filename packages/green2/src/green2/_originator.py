from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import typing as _typing


if _typing.TYPE_CHECKING:
    import datetime as _datetime
    import pathlib as _pathlib


__all__ = [
    "Originator",
]


_LOGGER = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Originator:
    """SEPA identity of the club collecting the contributions.

    *message_id* and *pmt_inf_id* are the base identifiers of a single
    collection run.  Their uniqueness over time (see
    :obj:`~green2.UNIQUE_DAYS_MESSAGE_ID` and
    :obj:`~green2.UNIQUE_MONTHS_PMT_INF_ID`) is up to the caller.
    """

    creator: str
    creditor: str
    iban: str
    bic: str
    creditor_id: str
    purpose: str
    message_id: str
    pmt_inf_id: str
    execution_date: _datetime.date | None

    def __post_init__(self) -> None:
        object.__setattr__(self, "iban", self.iban.replace(" ", "").upper())
        object.__setattr__(self, "bic", self.bic.replace(" ", "").upper())
        object.__setattr__(self, "creditor_id", self.creditor_id.replace(" ", ""))

    def problems(self) -> list[str]:
        """Return a description of each invalid field."""
        from . import _identifiers as _ids

        problems = []
        for attr in ("creator", "creditor"):
            value = getattr(self, attr)
            if not value:
                problems.append(f"{attr} is empty")
            elif len(value) > _ids.MAX_CHAR_NAME:
                problems.append(f"{attr} exceeds {_ids.MAX_CHAR_NAME} characters")
        if not _ids.is_valid_iban(self.iban):
            problems.append(f"invalid IBAN {self.iban!r}")
        if not _ids.is_valid_bic(self.bic):
            problems.append(f"invalid BIC {self.bic!r}")
        if not _ids.is_valid_creditor_id(self.creditor_id):
            problems.append(f"invalid creditor id {self.creditor_id!r}")
        if not self.purpose:
            problems.append("purpose is empty")
        elif len(self.purpose) > _ids.MAX_CHAR_PURPOSE:
            problems.append(f"purpose exceeds {_ids.MAX_CHAR_PURPOSE} characters")
        if not self.message_id or not _ids.is_valid_message_id(self.message_id):
            problems.append(f"invalid message id {self.message_id!r}")
        if not self.pmt_inf_id or not _ids.is_valid_pmt_inf_id(self.pmt_inf_id):
            problems.append(f"invalid payment information id {self.pmt_inf_id!r}")
        if self.execution_date is None:
            problems.append("execution date is missing")
        return problems

    def is_valid(self) -> bool:
        return not self.problems()

    def check(self) -> _typing.Self:
        from . import _errors

        if problems := self.problems():
            for problem in problems:
                _LOGGER.error("[originator] %s", problem)
            raise _errors.OriginatorError(problems)
        return self

    def replace(self, **changes) -> _typing.Self:
        return _dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, d: _typing.Mapping[str, _typing.Any], /) -> _typing.Self:
        from . import _util

        return cls(
            creator=str(d.get("creator", "")),
            creditor=str(d.get("creditor", "")),
            iban=str(d.get("iban", "")),
            bic=str(d.get("bic", "")),
            creditor_id=str(d.get("creditor_id", "")),
            purpose=str(d.get("purpose", "")),
            message_id=str(d.get("message_id", "")),
            pmt_inf_id=str(d.get("pmt_inf_id", "")),
            execution_date=_util.to_date_or_none(d.get("execution_date")),
        )

    def to_dict(self) -> dict[str, _typing.Any]:
        d = _dataclasses.asdict(self)
        if self.execution_date is not None:
            d["execution_date"] = self.execution_date.isoformat()
        return d

    @classmethod
    def from_file(cls, path: str | _pathlib.Path) -> _typing.Self:
        import yaml as _yaml

        _LOGGER.info("[originator] Read %s", path)
        with open(path, "r", encoding="utf-8") as f:
            d = _yaml.load(f, Loader=_yaml.FullLoader) or {}
        return cls.from_dict(d)

    def save(self, path: str | _pathlib.Path) -> None:
        import yaml as _yaml

        _LOGGER.info("[originator] Write %s", path)
        with open(path, "w", encoding="utf-8") as f:
            _yaml.dump(self.to_dict(), f, allow_unicode=True, sort_keys=False)
