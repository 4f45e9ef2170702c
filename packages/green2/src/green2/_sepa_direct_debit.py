from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

from . import _errors, _grouping, _types


if _typing.TYPE_CHECKING:
    import datetime as _datetime
    import pathlib as _pathlib

    import pandas as _pandas

    from . import _config, _originator, _people


__all__ = [
    "MEMBER_QUERY",
    "CollectionResult",
    "DataSource",
    "generate_collection",
    "generate_collection_from_source",
]


_LOGGER = _logging.getLogger(__name__)


MEMBER_QUERY = "SELECT * FROM Mitglieder"

DataSource = _typing.Callable[[str], _types.QueryResult]
"""Runs an SQL query on an open database connection."""


@_dataclasses.dataclass(frozen=True, kw_only=True)
class CollectionResult:
    """Outcome of one direct debit collection run.

    *document* is `None` if no member could be collected.
    """

    document: bytes | None
    grouping: _grouping.Grouping
    warnings: tuple[_errors.RowDataWarning, ...] = ()
    members_total: int = 0
    members_selected: int = 0
    selected_members: tuple[_people.Member, ...] = ()

    @property
    def groups(self) -> tuple[_grouping.PaymentGroup, ...]:
        return self.grouping.groups

    @property
    def excluded(self) -> tuple[_grouping.ExcludedMember, ...]:
        return self.grouping.excluded

    @property
    def number_of_transactions(self) -> int:
        return self.grouping.number_of_transactions

    @property
    def control_sum_cents(self) -> int:
        return self.grouping.control_sum_cents

    def summary(self) -> str:
        """One line summary, e.g. ``"1 of 3 members excluded, reasons: ..."``."""
        excluded = self.excluded
        text = f"{len(excluded)} of {self.members_selected} members excluded"
        if excluded:
            reasons = "; ".join(
                f"{e.membership_number} ({e.reason})" for e in excluded
            )
            text += f", reasons: {reasons}"
        if self.warnings:
            text += f" ({len(self.warnings)} data warnings)"
        return text

    def log_summary(self, logger: _logging.Logger | _logging.LoggerAdapter) -> None:
        from . import _util

        logger.info("")
        logger.info("==== Direct debit")
        logger.info("  Members read: %s", self.members_total)
        logger.info("  Members selected: %s", self.members_selected)
        logger.info("  Number of transactions: %s", self.number_of_transactions)
        logger.info(
            "  Control sum: %s", _util.format_cents_as_eur_de(self.control_sum_cents)
        )
        for group in self.groups:
            logger.info(
                "  %s: %s x %s",
                group.pmt_inf_id,
                group.number_of_transactions,
                _util.format_cents_as_eur_de(group.amount_cents),
            )
        logger.info("")
        logger.info("==== Excluded members")
        logger.info("  %s", self.summary())
        for warning in self.warnings:
            logger.info("  Data warning: %s", warning)

    def to_dataframe(self) -> _pandas.DataFrame:
        """One row per selected member with status ``ok`` or ``skipped``."""
        import pandas as pd

        included = {
            m.membership_number: (g, m) for g in self.groups for m in g.members
        }
        excluded = {e.membership_number: e for e in self.excluded}
        records = []
        for member in self.selected_members:
            holder = member.account_holder
            record = {
                "membership_number": member.membership_number,
                "name": member.name,
                "account_holder": member.account_holder_name,
                "iban": holder.iban,
                "bic": holder.bic,
                "mandate_signed": holder.mandate_signed,
                "status": "ok",
                "status_reason": "",
                "amount_cents": None,
                "pmt_inf_id": None,
            }
            if (entry := included.get(member.membership_number)) is not None:
                group, _ = entry
                record["amount_cents"] = group.amount_cents
                record["pmt_inf_id"] = group.pmt_inf_id
            else:
                record["status"] = "skipped"
                if (skipped := excluded.get(member.membership_number)) is not None:
                    record["status_reason"] = skipped.reason
            records.append(record)
        return pd.DataFrame.from_records(
            records,
            columns=[
                "membership_number",
                "name",
                "account_holder",
                "iban",
                "bic",
                "mandate_signed",
                "status",
                "status_reason",
                "amount_cents",
                "pmt_inf_id",
            ],
        )

    def write_document(self, path: str | _pathlib.Path) -> bool:
        """Write the XML document to *path*; `False` if there is none."""
        from . import _file

        if self.document is None:
            _LOGGER.warning("[SDD] No payments in direct debit => No file written")
            return False
        _LOGGER.info("[SDD] Write %s", path)
        _file.write_bytes(path, self.document)
        return True

    def write_report_xlsx(self, path: str | _pathlib.Path) -> None:
        from . import _util

        _util.write_dataframe_to_xlsx(
            self.to_dataframe(), path, sheet_name="Lastschrift"
        )


def generate_collection(
    query_result: _types.QueryResult,
    *,
    originator: _originator.Originator,
    config: _config.Config | None = None,
    contribution_cents: int | None = None,
    contributions_cents: _typing.Mapping[int, int] | None = None,
    select: _typing.Callable[[_people.Member], bool] | None = None,
    created_at: _datetime.datetime | None = None,
) -> CollectionResult:
    """Create a SEPA direct debit for the members in *query_result*.

    Raises :obj:`~green2.OriginatorError` if *originator* is invalid,
    :obj:`~green2.SchemaMismatchError` if mandatory columns are missing
    and :obj:`~green2.GroupingInputError` for invalid contributions.
    Problems of single rows or members are collected in the result.
    """
    import datetime

    from . import _config, _members, _pain

    if config is None:
        config = _config.Config()
    if created_at is None:
        created_at = datetime.datetime.now()

    originator.check()
    extraction = _members.load_members(
        query_result,
        default_contribution_cents=config.default_contribution_cents,
        duplicates=config.duplicate_members,
        max_workers=config.max_workers,
    )
    members = extraction.sorted_members()
    if select is not None:
        members = [m for m in members if select(m)]
        _LOGGER.info(
            "[SDD] Selected %s of %s members (%s)",
            len(members),
            len(extraction.members),
            getattr(select, "__name__", repr(select)),
        )

    grouping = _grouping.group_members(
        members,
        pmt_inf_id=originator.pmt_inf_id,
        contribution_cents=contribution_cents,
        contributions_cents=contributions_cents,
    )

    document = None
    if not grouping.groups:
        _LOGGER.warning("[SDD] No member can be collected => No direct debit")
    else:
        document = _pain.assemble_document(
            originator,
            grouping.groups,
            created_at=created_at,
            sequence_type=config.sequence_type,
            with_bom=config.sepa_with_bom,
        )
        message = _pain.PainMessage.loads(document)
        problems = message.consistency_problems()
        if (
            message.number_of_transactions != grouping.number_of_transactions
            or message.control_sum_cents != grouping.control_sum_cents
        ):
            problems.append("Document does not match the payment groups")
        if problems:
            for problem in problems:
                _LOGGER.error("[SDD] %s", problem)
            raise RuntimeError(f"Inconsistent direct debit: {'; '.join(problems)}")

    result = CollectionResult(
        document=document,
        grouping=grouping,
        warnings=extraction.warnings,
        members_total=len(extraction.members),
        members_selected=len(members),
        selected_members=tuple(members),
    )
    _LOGGER.info("[SDD] %s", result.summary())
    return result


def generate_collection_from_source(
    source: DataSource,
    *,
    query: str = MEMBER_QUERY,
    **kwargs,
) -> CollectionResult:
    """Run *query* on *source* and pass its result to :obj:`generate_collection`."""
    _LOGGER.info("[SDD] Run query %r", query)
    return generate_collection(source(query), **kwargs)
