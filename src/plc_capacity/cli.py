from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from .config import get_state_path
from .errors import CapacityError, ReportPreconditionError
from .formatting import format_formula, format_mb, format_number
from .logging_config import setup_logging
from .recommend import next_standard_size
from .report import breakdown_frame, render_text, report_filename
from .session import CalculatorSession
from .storage import FileStore

# (option, model field)
INPUT_OPTIONS = (
    ("--em", "em_count"),
    ("--un", "un_count"),
    ("--alarms-per-em", "alarms_per_em"),
    ("--alarms-per-un", "alarms_per_un"),
    ("--aoi", "aoi_count"),
    ("--error-margin", "error_margin_percent"),
    ("--spare", "spare_percent"),
)

CONSTANT_OPTIONS = (
    ("--const-framework", "framework"),
    ("--const-em", "per_em"),
    ("--const-un", "per_un"),
    ("--const-alarms-em", "per_em_alarm"),
    ("--const-alarms-un", "per_un_alarm"),
    ("--const-aoi", "per_aoi"),
)

PROJECT_OPTIONS = (
    ("--name", "name"),
    ("--number", "number"),
    ("--notes", "notes"),
)


def _print_summary(session: CalculatorSession) -> None:
    r = session.result
    print(f"Minimum required capacity: {format_mb(r.total_megabytes)} Mb ({format_number(r.total_bytes)} bytes)")
    print(format_formula(r))
    print(f"Recommended standard size: {next_standard_size(r.total_megabytes)} Mb")
    print()
    print(breakdown_frame(session.state, r).to_string(index=False))


def _collect(args: argparse.Namespace, options) -> Dict[str, Any]:
    return {
        field: getattr(args, field)
        for _, field in options
        if getattr(args, field) is not None
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PLC memory capacity calculator."
    )
    parser.add_argument(
        "--state",
        help="Path to the state file (default: $PLC_CAPACITY_HOME/state.json or ~/.plc_capacity/state.json).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Print the current capacity breakdown.")

    p_set = sub.add_parser("set", help="Edit inputs, constants or project details, then print the result.")
    for option, field in INPUT_OPTIONS + CONSTANT_OPTIONS:
        p_set.add_argument(option, dest=field, help=f"New value for {field}.")
    for option, field in PROJECT_OPTIONS:
        p_set.add_argument(option, dest=field, help=f"Project {field}.")

    p_export = sub.add_parser("export", help="Write an export JSON file.")
    p_export.add_argument(
        "--output-dir",
        "-o",
        default=".",
        help="Directory to write the export file into.",
    )

    p_import = sub.add_parser("import", help="Replace the current state with an export JSON file.")
    p_import.add_argument("path", help="Export file to import.")

    sub.add_parser("reset", help="Reset all values to their defaults.")

    p_report = sub.add_parser("report", help="Write the capacity requirements report.")
    p_report.add_argument(
        "--output",
        "-o",
        help="Report path. Defaults to PLC_Capacity_Report_<number>_<date>.txt in the current directory.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    store = FileStore(Path(args.state) if args.state else get_state_path())
    session = CalculatorSession(store)
    session.load()

    try:
        if args.command == "set":
            inputs = _collect(args, INPUT_OPTIONS)
            constants = _collect(args, CONSTANT_OPTIONS)
            project = _collect(args, PROJECT_OPTIONS)
            if inputs:
                session.update_inputs(**inputs)
            if constants:
                session.update_constants(**constants)
            if project:
                session.update_project(**project)
            _print_summary(session)

        elif args.command == "export":
            path = session.export_to(args.output_dir)
            print(f"Exported: {path}")

        elif args.command == "import":
            session.import_file(args.path)
            print("Data imported successfully")
            _print_summary(session)

        elif args.command == "reset":
            session.reset()
            print("Reset to default values")
            _print_summary(session)

        elif args.command == "report":
            report = session.build_report()
            path = Path(args.output or report_filename(session.state.project))
            path.write_text(render_text(report), encoding="utf-8")
            print(f"Report saved: {path}")

        else:
            _print_summary(session)

    except ReportPreconditionError as e:
        print(f"Warning: {e}", file=sys.stderr)
        return 1
    except CapacityError as e:
        print(f"Import failed: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
