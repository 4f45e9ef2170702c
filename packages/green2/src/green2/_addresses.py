"""Address data for serial letters and birthday lists."""

from __future__ import annotations

import logging as _logging
import typing as _typing


if _typing.TYPE_CHECKING:
    import pandas as _pandas

    from . import _people, _types


__all__ = [
    "ADDRESS_COLUMNS",
    "create_address_dataframe",
    "generate_address_data",
    "generate_birthday_data",
    "load_nicknames",
    "members_with_birthday",
    "salutation",
]


_LOGGER = _logging.getLogger(__name__)

ADDRESS_COLUMNS = [
    "Vorname",
    "Nachname",
    "Strasse",
    "Hausnummer",
    "PLZ",
    "Ort",
    "Geburtstag",
    "Anrede",
]


def load_nicknames(query_result: _types.QueryResult) -> dict[str, str]:
    """Read the ``Spitznamen`` table (name → nickname)."""
    from . import _columns, _query_result, _schema

    _query_result.check_query_result(query_result)
    header, *rows = query_result
    mapping = _schema.map_columns(header, _columns.NICKNAME_TABLE)
    name_idx = mapping.indices["name"]
    nickname_idx = mapping.indices["nickname"]
    nicknames = {}
    for row in rows:
        name, nickname = row[name_idx], row[nickname_idx]
        if name and nickname:
            nicknames[name] = nickname
    _LOGGER.debug("Loaded %s nicknames", len(nicknames))
    return nicknames


def salutation(
    member: _people.Member, nicknames: _typing.Mapping[str, str] | None = None
) -> str:
    """Return the salutation of a letter to *member*.

    >>> from green2._people import Address, AccountHolder, Member, Person
    >>> person = Person(prename="Johannes", lastname="Muster", is_male=True)
    >>> member = Member(
    ...     membership_number=1,
    ...     person=person,
    ...     home=Address(street=None, house_number=None, postcode=None, place=None),
    ...     account_holder=AccountHolder(prename="Johannes", lastname="Muster"),
    ... )
    >>> salutation(member)
    'Lieber Johannes'
    >>> salutation(member, {"Johannes": "Jo"})
    'Lieber Jo'
    """
    prename = member.person.prename or ""
    name = (nicknames or {}).get(prename, prename)
    greeting = "Lieber" if member.person.is_male else "Liebe"
    return f"{greeting} {name}"


def create_address_dataframe(
    members: _typing.Iterable[_people.Member],
    nicknames: _typing.Mapping[str, str] | None = None,
) -> _pandas.DataFrame:
    import pandas as pd

    records = []
    for member in sorted(members):
        person, home = member.person, member.home
        records.append(
            {
                "Vorname": person.prename,
                "Nachname": person.lastname,
                "Strasse": home.street,
                "Hausnummer": home.house_number,
                "PLZ": home.postcode,
                "Ort": home.place,
                "Geburtstag": person.birthday.isoformat() if person.birthday else "",
                "Anrede": salutation(member, nicknames),
            }
        )
    return pd.DataFrame.from_records(records, columns=ADDRESS_COLUMNS)


def generate_address_data(
    members: _typing.Iterable[_people.Member],
    nicknames: _typing.Mapping[str, str] | None = None,
) -> str:
    """Return ``;``-separated address data (with header) of *members*."""
    df = create_address_dataframe(members, nicknames)
    if df.empty:
        raise ValueError("No members to generate address data for")
    return df.to_csv(sep=";", index=False, lineterminator="\n")


def members_with_birthday(
    members: _typing.Iterable[_people.Member],
    year: int,
    *,
    ages: _typing.Callable[[int], bool] | None = None,
) -> dict[int, list[_people.Member]]:
    """Group members by the age they reach in *year*, oldest first."""
    by_age: dict[int, list[_people.Member]] = {}
    for member in sorted(members):
        if (birthday := member.person.birthday) is None:
            continue
        age = year - birthday.year
        if ages is None or ages(age):
            by_age.setdefault(age, []).append(member)
    return {age: by_age[age] for age in sorted(by_age, reverse=True)}


def generate_birthday_data(
    members: _typing.Iterable[_people.Member],
    year: int,
    *,
    ages: _typing.Callable[[int], bool] | None = None,
) -> str:
    """Return a plain text list of the birthdays in *year*.

    Members are split into active, passive and unknown if any member
    carries an activity flag.
    """
    import textwrap

    by_age = members_with_birthday(members, year, ages=ages)
    split_activity = any(
        m.is_active is not None for group in by_age.values() for m in group
    )

    def line(member: _people.Member) -> str:
        birthday = member.person.birthday
        assert birthday is not None
        return f"{birthday:%d.%m.} {member.name}"

    blocks = []
    for age, group in by_age.items():
        if split_activity:
            parts = []
            for label, flag in (("Aktiv", True), ("Passiv", False), ("Unbekannt", None)):
                selected = [m for m in group if m.is_active is flag]
                if selected:
                    parts.append(
                        f"{label}:\n"
                        + textwrap.indent("\n".join(map(line, selected)), "  ")
                    )
            body = "\n".join(parts)
        else:
            body = "\n".join(map(line, group))
        blocks.append(f"{age}:\n" + textwrap.indent(body, "  "))
    return "\n\n".join(blocks) + ("\n" if blocks else "")
