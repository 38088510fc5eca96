#!/usr/bin/env python3
"""
ledger_master.py

Rebuilds report sheets from a master ledger (xlsx or csv):
- funds     : one "Fund - <name>" sheet per fund (revenue/expense rows only)
- accounts  : one sheet per account
- summary   : consolidated Summary sheet (+ optional PDF)
- all       : accounts + funds + summary in one go

Examples:
  python3 ledger_master.py --in master_ledger.xlsx --profile VN all
  python3 ledger_master.py --in master_ledger.xlsx funds --name "Fund - Unrestricted Funds"
  python3 ledger_master.py --in master_ledger.xlsx funds --existing-only
  python3 ledger_master.py --in be_ledger.csv --profile BE summary --pdf be_summary.pdf
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ledger_core.config import (
    DEFAULT_INPUT_LEDGER,
    DEFAULT_PDF_SUMMARY_OUT,
    DEFAULT_PROFILE,
    DEFAULT_REPORTS_OUT,
    PROFILES,
    LedgerProfile,
    get_profile,
)
from ledger_core.errors import ConfigurationError
from ledger_core.excel_reports import ExcelReportRenderer
from ledger_core.io_ledger import LedgerSource, load_ledger
from ledger_core.paths import out_path
from ledger_core.pdf_reports import write_pdf_summary
from ledger_core.rebuild import (
    RebuildRequest,
    RebuildResult,
    rebuild_account_reports,
    rebuild_fund_reports,
    rebuild_summary,
)
from ledger_core.utils import timestamp_line


# -----------------------------
# Logging
# -----------------------------
def setup_logging(base_dir: Path) -> Path:
    log_path = out_path("logs", f"ledger_master_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log", base=base_dir)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # avoid duplicate handlers when main() runs more than once in a process
    if not root.handlers:
        fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")

        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.INFO)
        fh.setFormatter(fmt)

        sh = logging.StreamHandler()
        sh.setLevel(logging.WARNING)
        sh.setFormatter(fmt)

        root.addHandler(fh)
        root.addHandler(sh)

    logging.info("Logging started: %s", log_path)
    return log_path


# -----------------------------
# Runners (commands)
# -----------------------------
def _request(name: Optional[str]) -> RebuildRequest:
    return RebuildRequest.single(name) if name else RebuildRequest()


def _report(label: str, result: RebuildResult, renderer: ExcelReportRenderer) -> None:
    if result.not_found:
        print(f"⚠️ {result.message}")
        return
    print(f"✅ {label}: {result.message}")
    if renderer.skipped:
        print(f"   skipped {len(renderer.skipped)} report(s) with no existing sheet")


def run_funds(source: LedgerSource, profile: LedgerProfile, renderer: ExcelReportRenderer,
              name: Optional[str]) -> RebuildResult:
    result = rebuild_fund_reports(source, profile, renderer, _request(name))
    _report("Funds", result, renderer)
    return result


def run_accounts(source: LedgerSource, profile: LedgerProfile, renderer: ExcelReportRenderer,
                 name: Optional[str]) -> RebuildResult:
    result = rebuild_account_reports(source, profile, renderer, _request(name))
    _report("Accounts", result, renderer)
    return result


def run_summary(source: LedgerSource, profile: LedgerProfile, renderer: ExcelReportRenderer,
                pdf_name: Optional[str], base: Path) -> None:
    report = rebuild_summary(source, profile, renderer)
    print("✅ Comprehensive Summary sheet updated successfully!")
    if pdf_name:
        pdf_path = write_pdf_summary(report, out_path("pdf", pdf_name, base=base), profile)
        print(f"✅ Summary PDF created: {pdf_path}")


# -----------------------------
# CLI
# -----------------------------
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Ledger Master: rebuild fund/account/summary report sheets from a master ledger.")
    p.add_argument("--in", dest="ledger", default=DEFAULT_INPUT_LEDGER, help="Master ledger (.xlsx or .csv).")
    p.add_argument("--profile", default=DEFAULT_PROFILE, choices=sorted(PROFILES), help="Ledger profile.")
    p.add_argument("--sheet", default=None, help="Ledger sheet name (default: the profile's master ledger sheet).")
    p.add_argument("--out", default=None, help="Report workbook (default: output/xlsx/%s)." % DEFAULT_REPORTS_OUT)
    p.add_argument("--base-dir", default=".", help="Folder holding output/ (default: current folder).")

    sub = p.add_subparsers(dest="cmd", required=True)

    f = sub.add_parser("funds", help="Rebuild fund sheets (all, or one with --name).")
    f.add_argument("--name", default=None, help="Fund name or fund sheet name to rebuild on its own.")
    f.add_argument("--existing-only", action="store_true", help="Quick update: only refresh sheets that already exist.")

    a = sub.add_parser("accounts", help="Rebuild account sheets (all, or one with --name).")
    a.add_argument("--name", default=None, help="Account name or account sheet name to rebuild on its own.")
    a.add_argument("--existing-only", action="store_true", help="Quick update: only refresh sheets that already exist.")

    s = sub.add_parser("summary", help="Rebuild the consolidated Summary sheet.")
    s.add_argument("--pdf", nargs="?", const=DEFAULT_PDF_SUMMARY_OUT, default=None, help="Also write a summary PDF.")

    al = sub.add_parser("all", help="Rebuild accounts + funds + summary.")
    al.add_argument("--pdf", nargs="?", const=DEFAULT_PDF_SUMMARY_OUT, default=None, help="Also write a summary PDF.")

    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    base = Path(args.base_dir).expanduser().resolve()
    setup_logging(base)

    try:
        profile = get_profile(args.profile)
        ledger_path = Path(args.ledger).expanduser()
        sheet = args.sheet
        if sheet is None and ledger_path.suffix.lower() in (".xlsx", ".xlsm"):
            sheet = profile.ledger_sheet
        source = load_ledger(ledger_path, sheet=sheet)

        xlsx_path = Path(args.out).expanduser() if args.out else out_path("xlsx", DEFAULT_REPORTS_OUT, base=base)
        renderer = ExcelReportRenderer(xlsx_path, profile, existing_only=getattr(args, "existing_only", False))

        if args.cmd in ("accounts", "all"):
            run_accounts(source, profile, renderer, getattr(args, "name", None))
        if args.cmd in ("funds", "all"):
            run_funds(source, profile, renderer, getattr(args, "name", None))
        if args.cmd in ("summary", "all"):
            run_summary(source, profile, renderer, args.pdf, base)

        saved = renderer.save()
    except ConfigurationError as e:
        logging.error("%s", e)
        print(f"❌ {e}")
        return 1

    print(timestamp_line("Generated on"))
    if saved:
        print(f"📁 Report workbook: {saved}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
