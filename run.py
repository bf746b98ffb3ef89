#!/usr/bin/env python3
"""
SEC change feed - command wrapper
Usage: python run.py <command> [options]
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

commands = {
    "run": "Detect new, amended and updated filings for the watch list",
    "status": "Show detection state and alerts",
    "lookup": "Lookup CIK numbers for ticker symbols",
}


def _csv(value):
    return [v.strip() for v in value.split(",") if v.strip()]


def build_parser():
    parser = argparse.ArgumentParser(description="SEC filing change feed")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help=commands["run"])
    run_p.add_argument("--tickers", type=_csv, help="Comma separated tickers (overrides TICKERS)")
    run_p.add_argument("--ciks", type=_csv, help="Comma separated CIKs (overrides CIKS)")
    run_p.add_argument("--forms", type=_csv, help="Comma separated form types (overrides FORMS)")
    run_p.add_argument("--start-date", help="Inclusive start date YYYY-MM-DD")
    run_p.add_argument("--end-date", help="Inclusive end date YYYY-MM-DD")
    run_p.add_argument("--backfill", action="store_true", default=None,
                       help="On the first run, look back BACKFILL_DAYS")
    run_p.add_argument("--no-sections", action="store_true", help="Skip section extraction")
    run_p.add_argument("--no-ai", action="store_true", help="Skip AI summaries")
    run_p.add_argument("--output-dir", help="Directory for state, report and dataset")
    run_p.add_argument("--csv", action="store_true", help="Also write OUTPUT.csv")
    run_p.add_argument("--progress", action="store_true", help="Show a progress bar")

    status_p = sub.add_parser("status", help=commands["status"])
    status_p.add_argument("--output-dir", help="Directory holding STATE.json")

    lookup_p = sub.add_parser("lookup", help=commands["lookup"])
    lookup_p.add_argument("tickers", nargs="+", help="Ticker symbols")
    return parser


def settings_overrides(args) -> dict:
    """CLI flags that override environment settings."""
    overrides = {
        "tickers": args.tickers,
        "ciks": args.ciks,
        "forms": args.forms,
        "start_date": args.start_date,
        "end_date": args.end_date,
        "backfill": args.backfill,
        "output_dir": args.output_dir,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if args.no_sections:
        overrides["parse_sections"] = False
    if args.no_ai:
        overrides["ai_summarize"] = False
    if args.csv:
        overrides["output_formats"] = ["json", "csv"]
    return overrides


def cmd_run(args, settings):
    from core.pipeline import ChangeFeedPipeline

    settings = settings.model_copy(update=settings_overrides(args))
    result = ChangeFeedPipeline(settings, show_progress=args.progress).run()

    if result.message:
        print(result.message)
        return 0

    by_type = result.report["totals"]["byType"]
    print(f"\n📊 {result.changes_detected} change(s) across {result.targets} filer(s) "
          f"(new={by_type['new']}, amendment={by_type['amendment']}, update={by_type['update']})")
    for row in result.rows[:20]:
        print(f"   {row['changeType']:<9} {row.get('ticker') or row['cik']:<8} "
              f"{row['formType']:<8} {row['filingDate']} {row['accessionNumber']}")
    print(f"\nReport saved to {settings.output_dir}/REPORT.json and REPORT.md")
    return 0


def cmd_status(args, settings):
    from sec_filing_monitor import FilingMonitor

    FilingMonitor(args.output_dir or settings.output_dir).print_dashboard(verbose=args.verbose)
    return 0


def cmd_lookup(args, settings):
    from core.faults import ConfigurationFault
    from services.edgar_client import EdgarClient
    from services.storage import JsonFileStore
    from utils.cik import CIKLookup

    if not (settings.sec_user_agent or "").strip():
        raise ConfigurationFault("SEC_USER_AGENT environment variable is required")

    client = EdgarClient(settings.sec_user_agent, timeout=settings.request_timeout)
    lookup = CIKLookup(client.get_bulk_ticker_table, store=JsonFileStore(settings.output_dir))
    for ticker in args.tickers:
        cik = lookup.get_cik(ticker)
        if cik:
            print(f"✅ {ticker.upper()}: CIK {cik}")
        else:
            print(f"❌ {ticker.upper()}: not found")
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.command:
        print("SEC Change Feed - Available Commands:")
        print()
        for cmd, desc in commands.items():
            print(f"  python run.py {cmd:<8} - {desc}")
        print()
        print("Examples:")
        print("  python run.py run --tickers AAPL,MSFT --forms 10-K,10-Q")
        print("  python run.py run --ciks 320193 --start-date 2024-01-01 --csv")
        print("  python run.py status")
        print("  python run.py lookup AAPL NVDA")
        return 0

    from core.faults import ChangeFeedError
    from utils.config import get_settings

    handlers = {"run": cmd_run, "status": cmd_status, "lookup": cmd_lookup}
    try:
        return handlers[args.command](args, get_settings())
    except ChangeFeedError as e:
        print(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
