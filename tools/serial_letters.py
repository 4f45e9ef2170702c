#!/usr/bin/env python3
"""Address data for serial letters and the list of round birthdays

* Read the members from an exported ``Mitglieder`` query result
* Write ``;``-separated address data including the salutation
* Write the birthdays of the given year for the selected ages
"""

from __future__ import annotations

import logging
import sys

import green2


_LOGGER = logging.getLogger()

DEFAULT_AGES = "50,60,70,75,80,85,90,95,100"


def _parse_ages(s: str) -> frozenset[int]:
    return frozenset(int(age) for age in s.split(",") if age.strip())


def create_argument_parser():
    import argparse

    p = argparse.ArgumentParser()
    p.add_argument("members", metavar="<file>", help="Exported Mitglieder table")
    p.add_argument("--nicknames", metavar="<file>", help="Exported Spitznamen table")
    p.add_argument("--only-active", action="store_true", default=False)
    p.add_argument("--year", type=int, help="Birthday year (default: current year)")
    p.add_argument("--ages", type=_parse_ages, default=_parse_ages(DEFAULT_AGES))
    return p


def main(argv=None):
    ctx = green2.Green2Context(
        argv=argv,
        argument_parser=create_argument_parser(),
        out_dir="data/serial_letters_{{ filename_suffix }}",
    )
    args = ctx.parsed_args
    out_base = ctx.make_out_path("serial_letters_{{ filename_suffix }}")
    log_filename = out_base.with_suffix(".log")
    csv_filename = out_base.with_suffix(".csv")
    birthday_filename = out_base.with_name(out_base.name + "_birthdays.txt")

    ctx.configure_log_file(log_filename)

    extraction = green2.load_members(
        green2.load_query_result(args.members),
        duplicates=ctx.config.duplicate_members,
        max_workers=ctx.config.max_workers,
    )
    members = extraction.sorted_members()
    if args.only_active:
        members = [m for m in members if green2.is_active(m)]
    nicknames = {}
    if args.nicknames:
        nicknames = green2.load_nicknames(green2.load_query_result(args.nicknames))

    year = args.year or ctx.today.year
    address_data = green2.generate_address_data(members, nicknames)
    birthday_data = green2.generate_birthday_data(
        members, year, ages=args.ages.__contains__
    )

    _LOGGER.info("Members: %s (%s data warnings)", len(members), len(extraction.warnings))
    _LOGGER.info("Birthdays %s:\n%s", year, birthday_data)

    if ctx.dry_run:
        _LOGGER.info("SKIP WRITING OUTPUT (--dry-run given)")
        return 0

    _LOGGER.info("Write %s", csv_filename)
    csv_filename.write_text(address_data, encoding="utf-8")
    _LOGGER.info("Write %s", birthday_filename)
    birthday_filename.write_text(birthday_data, encoding="utf-8")

    _LOGGER.info("")
    _LOGGER.info("Output directory: %s", ctx.out_dir)
    _LOGGER.info("  Addresses: %s", csv_filename)
    _LOGGER.info("  Birthdays: %s", birthday_filename)
    _LOGGER.info("  Log file: %s", log_filename)
    return 0


if __name__ == "__main__":
    sys.exit(main())
