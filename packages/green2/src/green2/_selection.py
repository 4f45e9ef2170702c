"""Predicates on members and their boolean combinators.

>>> select = all_of(is_active, negate(is_contribution_free))
>>> select.__name__
'all_of(is_active, negate(is_contribution_free))'
"""

from __future__ import annotations

import typing as _typing


if _typing.TYPE_CHECKING:
    from . import _people

    MemberPredicate = _typing.Callable[[_people.Member], bool]


__all__ = [
    "all_of",
    "any_of",
    "has_mandate",
    "has_valid_iban",
    "is_active",
    "is_contribution_free",
    "membership_number_in",
    "negate",
]


def _named(name: str):
    def decorate(func):
        func.__name__ = func.__qualname__ = name
        return func

    return decorate


def _name_of(predicate) -> str:
    return getattr(predicate, "__name__", repr(predicate))


def all_of(*predicates: MemberPredicate) -> MemberPredicate:
    @_named(f"all_of({', '.join(_name_of(p) for p in predicates)})")
    def predicate(member: _people.Member) -> bool:
        return all(p(member) for p in predicates)

    return predicate


def any_of(*predicates: MemberPredicate) -> MemberPredicate:
    @_named(f"any_of({', '.join(_name_of(p) for p in predicates)})")
    def predicate(member: _people.Member) -> bool:
        return any(p(member) for p in predicates)

    return predicate


def negate(predicate: MemberPredicate) -> MemberPredicate:
    @_named(f"negate({_name_of(predicate)})")
    def negated(member: _people.Member) -> bool:
        return not predicate(member)

    return negated


def membership_number_in(numbers: _typing.Iterable[int]) -> MemberPredicate:
    numbers = frozenset(numbers)

    @_named(f"membership_number_in({sorted(numbers)})")
    def predicate(member: _people.Member) -> bool:
        return member.membership_number in numbers

    return predicate


def is_active(member: _people.Member) -> bool:
    """`True` unless the member is explicitly marked as not active."""
    return member.is_active is not False


def is_contribution_free(member: _people.Member) -> bool:
    return member.is_contribution_free


def has_valid_iban(member: _people.Member) -> bool:
    from . import _identifiers

    return _identifiers.is_valid_iban(member.account_holder.iban)


def has_mandate(member: _people.Member) -> bool:
    return member.account_holder.mandate_signed is not None
