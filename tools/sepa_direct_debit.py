#!/usr/bin/env python3
"""SEPA direct debit to collect membership contributions

* Read the members from an exported ``Mitglieder`` query result (CSV or xlsx)
* Create a pain.008.003.02 SEPA direct debit XML file
* Write a summary Excel xlsx file with the status of every member
"""

from __future__ import annotations

import logging
import sys

import green2


_LOGGER = logging.getLogger()


def create_argument_parser():
    import argparse

    from green2 import to_date_or_none

    p = argparse.ArgumentParser()
    p.add_argument("members", metavar="<file>", help="Exported Mitglieder table")
    p.add_argument("--originator", metavar="<file>", help="Originator YAML file")
    p.add_argument("--contribution", metavar="<amount>", help="Uniform amount in EUR")
    p.add_argument("--execution-date", type=to_date_or_none)
    p.add_argument("--message-id")
    p.add_argument("--pmt-inf-id")
    p.add_argument(
        "--sequence-type",
        choices=[str(t) for t in green2.SequenceType],
        help="Overrides the sequence_type of the config",
    )
    p.add_argument("--no-bom", dest="with_bom", action="store_false", default=None)
    p.add_argument("--only-active", action="store_true", default=False)
    p.add_argument(
        "--member",
        dest="membership_numbers",
        type=int,
        action="append",
        help="Only collect from the given member (may be repeated)",
    )
    p.add_argument("--yes", "-y", action="store_true", default=False)
    return p


def _load_originator(ctx: green2.Green2Context, args) -> green2.Originator:
    if args.originator:
        originator = green2.Originator.from_file(args.originator)
    else:
        originator = ctx.config.load_originator()
    changes = {
        key: value
        for key, value in (
            ("execution_date", args.execution_date),
            ("message_id", args.message_id),
            ("pmt_inf_id", args.pmt_inf_id),
        )
        if value is not None
    }
    return originator.replace(**changes) if changes else originator


def _select(args):
    predicates = []
    if args.only_active:
        predicates.append(green2.is_active)
    if args.membership_numbers:
        predicates.append(green2.membership_number_in(args.membership_numbers))
    return green2.all_of(*predicates) if predicates else None


def main(argv=None):
    import dataclasses

    ctx = green2.Green2Context(
        argv=argv,
        argument_parser=create_argument_parser(),
        out_dir="data/sepa_direct_debit_{{ filename_suffix }}",
    )
    args = ctx.parsed_args
    out_base = ctx.make_out_path("sepa_direct_debit_{{ filename_suffix }}")
    log_filename = out_base.with_suffix(".log")
    xml_filename = out_base.with_suffix(".xml")
    xlsx_filename = out_base.with_suffix(".xlsx")

    ctx.configure_log_file(log_filename)

    config = ctx.config
    if args.sequence_type is not None:
        config = dataclasses.replace(
            config, sequence_type=green2.SequenceType(args.sequence_type)
        )
    if args.with_bom is not None:
        config = dataclasses.replace(config, sepa_with_bom=args.with_bom)

    originator = _load_originator(ctx, args)
    contribution_cents = (
        green2.amount_to_cents(args.contribution) if args.contribution else None
    )

    query_result = green2.load_query_result(args.members)
    result = green2.generate_collection(
        query_result,
        originator=originator,
        config=config,
        contribution_cents=contribution_cents,
        select=_select(args),
        created_at=ctx.start_time,
    )
    result.log_summary(_LOGGER)

    if ctx.dry_run:
        _LOGGER.info("")
        _LOGGER.info("SKIP WRITING OUTPUT (--dry-run given)")
        _LOGGER.info("")
        return 0

    if result.document is not None and not args.yes:
        question = (
            f"Write direct debit of {result.number_of_transactions} transactions"
            f" ({green2.format_cents_as_eur_de(result.control_sum_cents)})?"
        )
        if not green2.console_confirm(question):
            _LOGGER.warning("Aborted, nothing written")
            return 1

    written = result.write_document(xml_filename)
    result.write_report_xlsx(xlsx_filename)

    _LOGGER.info("")
    _LOGGER.info("Output directory: %s", ctx.out_dir)
    if written:
        _LOGGER.info("  SEPA XML: %s", xml_filename)
    _LOGGER.info("  Excel: %s", xlsx_filename)
    _LOGGER.info("  Log file: %s", log_filename)
    return 0


if __name__ == "__main__":
    sys.exit(main())
