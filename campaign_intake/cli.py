import argparse
import json
import logging
import sys
from dotenv import load_dotenv

from campaign_intake.config import Config
from campaign_intake.normalizer import SHEET_ID_KEY
from campaign_intake.schema import generate_csv_header, generate_template_csv
from campaign_intake.sheets.client import SheetsClient, extract_sheet_id
from campaign_intake import pipeline

load_dotenv()  # loads .env into process env

CUSTOM_SOURCE = "custom"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="campaign-intake",
        description="Fetch published campaign sheets and reconcile them with the campaign schema.",
    )
    p.add_argument(
        "--config-file",
        default=None,
        help='Path to JSON config (e.g., {"sources": {"dashboard": {"sheet_id": "...", "gid": "0"}}})',
    )
    p.add_argument("--base-url", default=None, help="Override spreadsheet host base URL")

    # HTTP (SheetsClient)
    p.add_argument("--timeout-connect", type=float, default=3.0, help="Connect timeout (seconds)")
    p.add_argument("--timeout-read", type=float, default=15.0, help="Read timeout (seconds)")
    p.add_argument("--max-retries", type=int, default=0, help="Retries for 429/5xx/transport errors (default: none)")
    p.add_argument("--backoff-base-s", type=float, default=0.5, help="Exponential backoff base (seconds)")
    p.add_argument("--backoff-cap-s", type=float, default=8.0, help="Exponential backoff cap (seconds)")

    # Logging
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level",
    )

    sub = p.add_subparsers(dest="command", required=True)

    f = sub.add_parser("fetch", help="Fetch one source and print its records as JSON")
    f.add_argument("--source", default="dashboard", help="Configured source name (default: dashboard)")
    f.add_argument("--sheet-id", default=None, help="Sheet id or spreadsheet URL (overrides the source)")
    f.add_argument("--gid", default=None, help="Tab id (overrides the source)")
    f.add_argument("--record", default=None, help="Fetch the campaign sheet linked from the record with this sheet id")

    d = sub.add_parser("diagnose", help="Test every configured source and report its structure")
    d.add_argument("--sheet-id", default=None, help="Also test this sheet id or spreadsheet URL (first tab)")

    t = sub.add_parser("template", help="Print a CSV template for a new sheet")
    t.add_argument("--header-only", action="store_true", help="Print only the header line")
    return p


def _sheet_id_arg(parser: argparse.ArgumentParser, value: str | None) -> str | None:
    if value is None:
        return None
    sheet_id = extract_sheet_id(value)
    if sheet_id is None:
        parser.error(f"not a sheet id or spreadsheet URL: {value!r}")
    return sheet_id


def _print_json(obj) -> None:
    json.dump(obj, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --- logging setup ---
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("cli")

    if args.command == "template":
        print(generate_csv_header() if args.header_only else generate_template_csv())
        sys.exit(0)

    sheet_id = _sheet_id_arg(parser, args.sheet_id)

    # --- build config ---
    # Precedence: CLI > file > env > defaults
    if args.command == "fetch":
        source_name = args.source
        gid = args.gid
    else:
        source_name = CUSTOM_SOURCE if sheet_id else None
        gid = "" if sheet_id else None  # custom sheets are read from their first tab
    try:
        cfg = Config(
            file_path=args.config_file,
            base_url=args.base_url,
            source_name=source_name,
            sheet_id=sheet_id,
            gid=gid,
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    client = SheetsClient(
        base_url=cfg.base_url(),
        timeout=(args.timeout_connect, args.timeout_read),
        max_retries=args.max_retries,
        backoff_base_s=args.backoff_base_s,
        backoff_cap_s=args.backoff_cap_s,
    )

    # --- run ---
    try:
        if args.command == "fetch":
            try:
                source = cfg.source(args.source)
            except KeyError as e:
                parser.error(e.args[0])
            result = pipeline.ingest(source, client)
            if args.record is not None and "error" not in result:
                record = next(
                    (r for r in result["records"] if r.get(SHEET_ID_KEY) == args.record), None
                )
                if record is None:
                    logger.error("No record with sheet id %r in %s", args.record, source["name"])
                    sys.exit(1)
                result = pipeline.ingest_detail(record, client)
            _print_json(result)
            exit_code = 1 if "error" in result else 0
        else:
            results = pipeline.diagnose(client, cfg.sources())
            _print_json(results)
            exit_code = 0 if all(r["success"] for r in results) else 1
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        sys.exit(2)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
