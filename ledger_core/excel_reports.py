"""
ledger_core.excel_reports
Excel report sheets (openpyxl). Each render call clears one sheet and rewrites it.
"""
from __future__ import annotations
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import MAX_SHEET_TITLE, NUMBER_FORMAT, LedgerProfile
from .grouping import loose_key
from .summaries import FUND_REPORT, ReportDataset, SummaryReport, SummarySection
from .utils import timestamp_line

log = logging.getLogger(__name__)

DATE_NUMBER_FORMAT = "dd/mm/yy"


def require_openpyxl():
    try:
        from openpyxl import Workbook, load_workbook  # noqa
        from openpyxl.styles import Font  # noqa
        return Workbook, load_workbook, Font
    except ImportError:
        raise SystemExit("Missing dependency: openpyxl\nInstall with: pip3 install openpyxl\n")


def sheet_title(name: str) -> str:
    return loose_key(name)[:MAX_SHEET_TITLE].strip() or "Untitled"


class ExcelReportRenderer:
    """
    Writes report datasets into a workbook.

    The workbook at ``xlsx_path`` is opened when it exists, so other sheets in it
    (the master ledger, hand-made tabs) survive a rebuild. With ``existing_only``
    only sheets that are already present get rewritten.
    """

    def __init__(self, xlsx_path: Path, profile: LedgerProfile, existing_only: bool = False):
        Workbook, load_workbook, Font = require_openpyxl()
        self.path = Path(xlsx_path)
        self.profile = profile
        self.existing_only = existing_only
        self.bold = Font(bold=True)
        self.italic = Font(italic=True, size=9)
        self.written: List[str] = []
        self.skipped: List[str] = []
        # sheet title -> report that owns it in this session
        self._owners: Dict[str, Tuple[str, str]] = {sheet_title(profile.summary_sheet): ("summary", "")}

        if self.path.exists():
            self.wb = load_workbook(self.path)
            self._placeholder = None
        else:
            self.wb = Workbook()
            self._placeholder = self.wb.active.title

    def title_for(self, dataset: ReportDataset) -> str:
        if dataset.kind == FUND_REPORT:
            return sheet_title(self.profile.fund_sheet_prefix + loose_key(dataset.key))
        return sheet_title(dataset.key)

    def _claim(self, title: str, owner: Tuple[str, str]) -> str:
        """Give each report its own sheet; a second report folding to the same title gets ' (n)'."""
        if self._owners.setdefault(title, owner) == owner:
            return title
        n = 2
        while True:
            suffix = f" ({n})"
            candidate = title[:MAX_SHEET_TITLE - len(suffix)].rstrip() + suffix
            if self._owners.setdefault(candidate, owner) == owner:
                log.warning("Sheet '%s' is taken by '%s'; writing '%s' to '%s'",
                            title, self._owners[title][1] or title, owner[1], candidate)
                return candidate
            n += 1

    def _fresh_sheet(self, title: str):
        if title in self.wb.sheetnames:
            idx = self.wb.sheetnames.index(title)
            self.wb.remove(self.wb[title])
            return self.wb.create_sheet(title, idx)
        if self.existing_only:
            self.skipped.append(title)
            log.info("Skipping '%s' (no existing sheet)", title)
            return None
        return self.wb.create_sheet(title)

    def render(self, dataset: ReportDataset) -> None:
        title = self._claim(self.title_for(dataset), (dataset.kind, dataset.key))
        ws = self._fresh_sheet(title)
        if ws is None:
            return

        header = list(dataset.header)
        debit_col = header.index(self.profile.debit_column) + 1
        credit_col = header.index(self.profile.credit_column) + 1

        ws.append(header)
        for c in range(1, len(header) + 1):
            ws.cell(row=1, column=c).font = self.bold

        for r in dataset.rows:
            ws.append(list(r))
        last_data_row = ws.max_row

        for i in range(2, last_data_row + 1):
            ws.cell(row=i, column=debit_col).number_format = NUMBER_FORMAT
            ws.cell(row=i, column=credit_col).number_format = NUMBER_FORMAT
            for c in range(1, len(header) + 1):
                cell = ws.cell(row=i, column=c)
                if isinstance(cell.value, (datetime, date)):
                    cell.number_format = DATE_NUMBER_FORMAT

        labels_row = last_data_row + 2
        values_row = labels_row + 1
        t = dataset.totals
        for col, label, value in (
            (debit_col, "Total Debit", t.total_debit),
            (credit_col, "Total Credit", t.total_credit),
            (credit_col + 1, "Remaining funds", t.remaining),
        ):
            ws.cell(row=labels_row, column=col, value=label).font = self.bold
            cell = ws.cell(row=values_row, column=col, value=value)
            cell.font = self.bold
            cell.number_format = NUMBER_FORMAT

        stamp = ws.cell(row=values_row + 2, column=max(len(header), credit_col + 1),
                        value=timestamp_line("Last update"))
        stamp.font = self.italic
        ws.freeze_panes = "A2"

        self.written.append(title)

    def _write_section(self, ws, row: int, section: SummarySection, name_header: str, total_label: str) -> int:
        cur = self.profile.currency
        ws.cell(row=row, column=1, value=section.title).font = self.bold
        row += 1
        for c, h in enumerate([name_header, f"Total Debit ({cur})", f"Total Credit ({cur})", f"Remaining ({cur})"], 1):
            ws.cell(row=row, column=c, value=h).font = self.bold
        row += 1

        if not section.lines:
            ws.cell(row=row, column=1, value="No data available.").font = self.italic
            return row + 2

        for line in section.lines:
            ws.append([line.name, line.total_debit, line.total_credit, line.remaining])
        g = section.grand_total
        ws.append([total_label, g.total_debit, g.total_credit, g.remaining])
        last = ws.max_row
        for c in range(1, 5):
            ws.cell(row=last, column=c).font = self.bold
        for r in range(row, last + 1):
            for c in range(2, 5):
                ws.cell(row=r, column=c).number_format = NUMBER_FORMAT
        return last + 2

    def render_summary(self, report: SummaryReport) -> None:
        title = sheet_title(self.profile.summary_sheet)
        ws = self._fresh_sheet(title)
        if ws is None:
            return

        ws["A1"] = self.profile.organization or self.profile.ledger_sheet
        ws["A2"] = "COMPREHENSIVE FINANCIAL SUMMARY REPORT"
        ws["A3"] = timestamp_line("Generated on")
        ws["A1"].font = self.bold

        row = 5
        ws.cell(row=row, column=1, value="ACCOUNTS SUMMARY").font = self.bold
        row += 2
        for section in report.accounts:
            row = self._write_section(ws, row, section, "Account", "TOTAL")

        ws.cell(row=row, column=1, value="FUND SUMMARY").font = self.bold
        row += 2
        self._write_section(ws, row, report.funds, "Name", "GRAND TOTAL (All Account)")

        ws.column_dimensions["A"].width = 42
        for col in ("B", "C", "D"):
            ws.column_dimensions[col].width = 20

        self.wb.move_sheet(ws, offset=-self.wb.index(ws))
        self.written.append(title)

    def save(self) -> Optional[Path]:
        if self._placeholder and self._placeholder in self.wb.sheetnames and len(self.wb.sheetnames) > 1:
            self.wb.remove(self.wb[self._placeholder])
            self._placeholder = None
        if not self.written:
            log.info("Nothing written; %s left untouched", self.path)
            return None
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(self.path)
        log.info("Saved %d sheet(s) to %s", len(self.written), self.path)
        return self.path
