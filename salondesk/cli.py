"""Command line entry point for exporting client and invoice views."""
import argparse
import json
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from salondesk.core.errors import ConfigurationError
from salondesk.core.logging import configure_logging
from salondesk.core.settings import DashboardSettings
from salondesk.processing.channels import channel_breakdown
from salondesk.processing.pipeline import VIEWS, load_rows, run_pipeline


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI entry point."""

    parser = argparse.ArgumentParser(description="Aggregate salon reservations into clients or invoices")
    parser.add_argument(
        "view",
        choices=[*VIEWS, "channels"],
        help="Which view to build from the reservation rows",
    )
    parser.add_argument(
        "--input",
        type=Path,
        help="JSON file with reservation rows (defaults to calling the reservations webhook)",
    )
    parser.add_argument(
        "--webhook-url",
        help="Reservations webhook URL (overrides RESERVATIONS_WEBHOOK_URL)",
    )
    parser.add_argument(
        "--timezone",
        help="IANA zone used to interpret reservation timestamps",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="CSV file to write (default: output/<view>.csv)",
    )
    parser.add_argument(
        "--sink",
        choices=["csv", "sheets", "excel"],
        default="csv",
        help="Where to forward rows after writing the CSV",
    )
    parser.add_argument("--spreadsheet-id", help="Google Sheets spreadsheet ID for the sheets sink")
    parser.add_argument("--worksheet", default="Sheet1", help="Worksheet title inside the Google Sheets document")
    parser.add_argument(
        "--service-account",
        type=Path,
        help="Path to a Google service account JSON key used for Sheets pushes",
    )
    parser.add_argument("--excel-output", type=Path, help="Excel file to write when --sink=excel")
    return parser


def settings_from_args(args: argparse.Namespace) -> DashboardSettings:
    settings = DashboardSettings.from_env()
    overrides = {}
    if args.webhook_url:
        overrides["reservations_webhook_url"] = args.webhook_url
    if args.timezone:
        overrides["timezone"] = args.timezone
    return replace(settings, **overrides) if overrides else settings


def main(argv: list[str] | None = None) -> None:
    """Entrypoint for running the pipeline from the command line."""

    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings_from_args(args)
    try:
        settings.zone
    except ConfigurationError as exc:
        parser.error(str(exc))

    if args.view == "channels":
        rows = load_rows(settings, args.input)
        summary = channel_breakdown(rows, settings, datetime.now(settings.zone))
        print(json.dumps(summary, ensure_ascii=False, indent=2))
        return

    output_path = run_pipeline(
        args.view,
        settings,
        args.output or Path("output") / f"{args.view}.csv",
        input_path=args.input,
        sink=args.sink,
        spreadsheet_id=args.spreadsheet_id,
        worksheet_title=args.worksheet,
        service_account_path=args.service_account,
        excel_path=args.excel_output,
    )
    print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
