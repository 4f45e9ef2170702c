from __future__ import annotations

import dataclasses as _dataclasses
import functools as _functools
import typing as _typing


if _typing.TYPE_CHECKING:
    import datetime as _datetime


__all__ = [
    "AccountHolder",
    "Address",
    "Member",
    "Person",
]


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Person:
    prename: str | None
    lastname: str | None
    title: str | None = None
    birthday: _datetime.date | None = None
    is_male: bool | None = None

    @property
    def name(self) -> str:
        """Display name ``"<lastname> <prename>"``.

        >>> Person(prename="Erika", lastname="Mustermann").name
        'Mustermann Erika'
        """
        return " ".join(p for p in (self.lastname, self.prename) if p)


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Address:
    street: str | None
    house_number: str | None
    postcode: str | None
    place: str | None

    def __str__(self) -> str:
        street = " ".join(p for p in (self.street, self.house_number) if p)
        place = " ".join(p for p in (self.postcode, self.place) if p)
        return ", ".join(p for p in (street, place) if p)


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class AccountHolder(Person):
    iban: str = ""
    bic: str = ""
    mandate_signed: _datetime.date | None = None
    mandate_changed: bool = False

    def has_iban(self) -> bool:
        return bool(self.iban)

    def has_bic(self) -> bool:
        return bool(self.bic)

    @property
    def sepa_name(self) -> str:
        """Name as used for the debtor of a direct debit.

        >>> AccountHolder(prename="Erika", lastname="Mustermann").sepa_name
        'Mustermann, Erika'
        """
        return ", ".join(p for p in (self.lastname, self.prename) if p)


@_functools.total_ordering
@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class Member:
    """A club member as read from the ``Mitglieder`` table.

    Members are equal if their membership numbers are equal and are
    ordered by their display name.
    """

    membership_number: int | None
    person: Person
    home: Address
    account_holder: AccountHolder
    is_active: bool | None = None
    is_contribution_free: bool = False
    contribution_cents: int | None = None
    member_since: _datetime.date | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Member):
            return NotImplemented
        return self.membership_number == other.membership_number

    def __hash__(self) -> int:
        return hash(self.membership_number)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Member):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        return f"{self.membership_number}: {self.name}"

    @property
    def name(self) -> str:
        return self.person.name

    @property
    def sort_key(self) -> tuple[tuple[str, str], int]:
        from . import _util

        number = -1 if self.membership_number is None else self.membership_number
        return (_util.collation_key(self.name), number)

    @property
    def account_holder_name(self) -> str:
        return self.account_holder.sepa_name
