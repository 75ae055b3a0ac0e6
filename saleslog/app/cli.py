"""Command-line front end.

Subcommands mirror the three views of the app: ``dashboard``, ``add-sale`` and
``locations``. Destructive commands ask for confirmation before touching the
stores unless ``--yes`` is passed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, TextIO

from ..core.errors import ConfigError, ValidationError
from ..io.logging_setup import configure
from ..report.aggregation import history
from .config import Settings
from .main import Ledger, build_ledger

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2

CONFIRM_REMOVE_SALE = "Delete this sale record?"
CONFIRM_REMOVE_LOCATION = "Delete this location? Removing it may affect sales history."
CONFIRM_CLEAR = "Clear ALL sales data?"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="saleslog", description="Log sales and shipping locations.")
    parser.add_argument("--backend", choices=["file", "memory"], help="storage backend")
    parser.add_argument("--data-dir", help="directory for the file backend")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("dashboard", help="totals and sales history")

    add = sub.add_parser("add-sale", help="log a sale")
    add.add_argument("name")
    add.add_argument("price")
    add.add_argument("-q", "--quantity", default="1")
    add.add_argument("-l", "--location", default=None, help="shipping location id")

    rm = sub.add_parser("remove-sale", help="delete one sale record")
    rm.add_argument("id")
    rm.add_argument("-y", "--yes", action="store_true", help="skip confirmation")

    clear = sub.add_parser("clear", help="delete every sale record")
    clear.add_argument("-y", "--yes", action="store_true", help="skip confirmation")

    locs = sub.add_parser("locations", help="list or manage shipping locations")
    loc_sub = locs.add_subparsers(dest="action")
    loc_add = loc_sub.add_parser("add", help="add a location")
    loc_add.add_argument("name")
    loc_add.add_argument("address")
    loc_rm = loc_sub.add_parser("remove", help="delete a location")
    loc_rm.add_argument("id")
    loc_rm.add_argument("-y", "--yes", action="store_true", help="skip confirmation")
    return parser


def confirm(question: str, stdin: TextIO, stdout: TextIO) -> bool:
    stdout.write(f"{question} [y/N] ")
    stdout.flush()
    answer = stdin.readline()
    return answer.strip().lower() in ("y", "yes")


def fmt_amount(value: float) -> str:
    return f"{value:,.2f}"


def show_dashboard(ledger: Ledger, out: TextIO) -> None:
    summary = ledger.summary()
    out.write(f"Total sales: {fmt_amount(summary.total_amount)}\n")
    out.write(f"Items sold:  {summary.sale_count}\n")
    rows = history(ledger.sales.list(), ledger.locations.list())
    if not rows:
        out.write("No sales recorded yet.\n")
        return
    out.write("\n")
    for row in rows:
        out.write(
            f"{row.created_at.astimezone():%d/%m/%y %H:%M}  {row.name:<24} {row.location_name:<16} "
            f"{row.quantity:>4} x {fmt_amount(row.unit_price):>10} = {fmt_amount(row.line_total):>12}  {row.id}\n"
        )


def show_locations(ledger: Ledger, out: TextIO) -> None:
    locations = ledger.locations.list()
    if not locations:
        out.write("No shipping locations.\n")
        return
    for loc in locations:
        out.write(f"{loc.id}  {loc.name}  ({loc.address})\n")


def run(args: argparse.Namespace, ledger: Ledger, stdin: TextIO, out: TextIO) -> int:
    command = args.command or "dashboard"
    if command == "dashboard":
        show_dashboard(ledger, out)
    elif command == "add-sale":
        # only existing locations can be picked; dangling ids arise from later deletes
        if args.location and ledger.locations.get(args.location) is None:
            out.write(f"No location with id {args.location}\n")
            return EXIT_NOT_FOUND
        record = ledger.sales.add(args.name, args.price, args.quantity, args.location)
        out.write(f"Added {record.name} x{record.quantity} ({fmt_amount(record.line_total)}) {record.id}\n")
    elif command == "remove-sale":
        if ledger.sales.get(args.id) is None:
            out.write(f"No sale with id {args.id}\n")
            return EXIT_NOT_FOUND
        if not (args.yes or confirm(CONFIRM_REMOVE_SALE, stdin, out)):
            out.write("Cancelled.\n")
            return EXIT_OK
        ledger.sales.remove(args.id)
        out.write("Removed.\n")
    elif command == "clear":
        if not (args.yes or confirm(CONFIRM_CLEAR, stdin, out)):
            out.write("Cancelled.\n")
            return EXIT_OK
        ledger.sales.clear()
        out.write("All sales cleared.\n")
    elif command == "locations":
        if args.action == "add":
            loc = ledger.locations.add(args.name, args.address)
            out.write(f"Added location {loc.name} {loc.id}\n")
        elif args.action == "remove":
            if ledger.locations.get(args.id) is None:
                out.write(f"No location with id {args.id}\n")
                return EXIT_NOT_FOUND
            if not (args.yes or confirm(CONFIRM_REMOVE_LOCATION, stdin, out)):
                out.write("Cancelled.\n")
                return EXIT_OK
            ledger.locations.remove(args.id)
            out.write("Removed.\n")
        else:
            show_locations(ledger, out)
    return EXIT_OK


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    try:
        settings = Settings.from_env(environ)
    except ConfigError as e:
        stderr.write(f"{e}\n")
        return EXIT_USAGE
    overrides: Dict[str, object] = {}
    if args.backend:
        overrides["backend"] = args.backend
    if args.data_dir:
        overrides["data_dir"] = Path(args.data_dir).expanduser()
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    settings = replace(settings, **overrides)
    configure(settings.log_level, stderr)
    if overrides:
        logger.debug("settings overridden from command line: %s", ", ".join(overrides))

    ledger = build_ledger(settings)
    try:
        return run(args, ledger, stdin, stdout)
    except ValidationError as e:
        stderr.write(f"{e.message}\n")
        return EXIT_USAGE


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
