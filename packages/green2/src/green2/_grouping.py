from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

from . import _errors, _people


__all__ = [
    "ExcludedMember",
    "Grouping",
    "PaymentGroup",
    "check_amount",
    "exclusion_reasons",
    "group_members",
]


_LOGGER = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class PaymentGroup:
    """Members paying the same amount, collected in one ``PmtInf`` block."""

    amount_cents: int
    members: tuple[_people.Member, ...]
    pmt_inf_id: str

    @property
    def number_of_transactions(self) -> int:
        return len(self.members)

    @property
    def control_sum_cents(self) -> int:
        return self.amount_cents * len(self.members)


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class ExcludedMember:
    membership_number: int | None
    name: str
    reasons: tuple[str, ...]

    @property
    def reason(self) -> str:
        return ", ".join(self.reasons)


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Grouping:
    groups: tuple[PaymentGroup, ...]
    excluded: tuple[ExcludedMember, ...] = ()

    @property
    def number_of_transactions(self) -> int:
        return sum(g.number_of_transactions for g in self.groups)

    @property
    def control_sum_cents(self) -> int:
        return sum(g.control_sum_cents for g in self.groups)

    @property
    def excluded_membership_numbers(self) -> list[int | None]:
        return [e.membership_number for e in self.excluded]

    @property
    def included_members(self) -> list[_people.Member]:
        return [m for g in self.groups for m in g.members]


def check_amount(amount: object, what: str) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise _errors.GroupingInputError(
            f"Invalid {what} {amount!r}, expected integer cents"
        )
    if amount <= 0:
        raise _errors.GroupingInputError(f"Invalid {what} {amount!r}, must be > 0")
    return amount


def exclusion_reasons(member: _people.Member, amount_cents: int | None) -> list[str]:
    """Return the reasons why *member* cannot be collected (empty if none)."""
    from . import _identifiers

    holder = member.account_holder
    reasons = []
    if member.membership_number is None:
        reasons.append("no membership number")
    if member.is_contribution_free:
        reasons.append("contribution free")
    if not holder.has_iban():
        reasons.append("no IBAN")
    elif not _identifiers.is_valid_iban(holder.iban):
        reasons.append(f"invalid IBAN {holder.iban!r}")
    if holder.has_bic() and not _identifiers.is_valid_bic(holder.bic):
        reasons.append(f"invalid BIC {holder.bic!r}")
    if holder.mandate_signed is None:
        reasons.append("no mandate signature date")
    if amount_cents is None:
        reasons.append("no contribution")
    elif amount_cents <= 0:
        reasons.append("contribution <= 0")
    return reasons


def group_members(
    members: _typing.Iterable[_people.Member],
    *,
    pmt_inf_id: str,
    contribution_cents: int | None = None,
    contributions_cents: _typing.Mapping[int, int] | None = None,
) -> Grouping:
    """Partition *members* into payment groups keyed by amount.

    The amount of a member is *contribution_cents* if given, the entry
    of *contributions_cents* for its membership number if given, and
    its own contribution otherwise.  Members that cannot be collected
    end up in :obj:`Grouping.excluded` together with the reasons.

    Groups are ordered by amount, group ``i`` (starting at 1) gets the
    payment information id ``f"{pmt_inf_id}-{i}"``.
    """
    from . import _identifiers

    if contribution_cents is not None and contributions_cents is not None:
        raise _errors.GroupingInputError(
            "Give either a uniform contribution or per-member contributions, not both"
        )
    if contribution_cents is not None:
        check_amount(contribution_cents, "contribution")
    if contributions_cents is not None:
        for number, amount in contributions_cents.items():
            check_amount(amount, f"contribution of member {number}")

    members = list(members)
    seen: set[int] = set()
    for member in members:
        if member.membership_number is None:
            continue
        if member.membership_number in seen:
            raise _errors.GroupingInputError(
                f"Duplicate membership number {member.membership_number}"
            )
        seen.add(member.membership_number)

    by_amount: dict[int, list[_people.Member]] = {}
    excluded: list[ExcludedMember] = []
    for member in sorted(members):
        if contribution_cents is not None:
            amount = contribution_cents
        elif contributions_cents is not None and (
            member.membership_number in contributions_cents
        ):
            amount = contributions_cents[member.membership_number]
        else:
            amount = member.contribution_cents

        if reasons := exclusion_reasons(member, amount):
            _LOGGER.warning("[group] Skip member %s: %s", member, ", ".join(reasons))
            excluded.append(
                ExcludedMember(
                    membership_number=member.membership_number,
                    name=member.name,
                    reasons=tuple(reasons),
                )
            )
            continue
        assert amount is not None
        by_amount.setdefault(amount, []).append(member)

    groups = []
    for idx, amount in enumerate(sorted(by_amount), start=1):
        group_id = f"{pmt_inf_id}-{idx}"
        if not _identifiers.is_valid_pmt_inf_id(group_id):
            raise _errors.GroupingInputError(
                f"Invalid payment information id {group_id!r}"
            )
        groups.append(
            PaymentGroup(
                amount_cents=amount,
                members=tuple(by_amount[amount]),
                pmt_inf_id=group_id,
            )
        )
        _LOGGER.info(
            "[group] %s: %s transactions of %s cents",
            group_id,
            len(by_amount[amount]),
            amount,
        )

    return Grouping(groups=tuple(groups), excluded=tuple(excluded))
