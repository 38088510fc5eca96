"""Shared ledger fixtures.

The sample ledger follows the VN master ledger layout: debit and credit sit in
columns I and J, the date in column B, and funds only matter for revenue and
expense accounts.
"""

from __future__ import annotations

import csv
from pathlib import Path

import pytest
from openpyxl import Workbook

from ledger_core.config import PROFILES
from ledger_core.io_ledger import LedgerSource

VN_HEADER = (
    "No.", "Date", "Account", "Funds", "Description", "Payee",
    "Category", "Ref", "Debit (VND)", "Credit (VND)", "Bill",
)


def make_row(no, date, account, fund, debit, credit, desc=""):
    return (no, date, account, fund, desc, "", "", "", debit, credit, "")


LEDGER_ROWS = [
    make_row(1, "15/01/24", "VN - Expenses", "Unrestricted Funds", 100000, 0, "Field fuel"),
    make_row(2, "03/01/24", "VN - Revenues", "Unrestricted Funds", 0, 500000, "Grant"),
    make_row(3, "10/01/24", "VN - Expenses", "Legal & Admin", "250,000.00", "", "Permit"),
    make_row(4, "02/01/24", "VN - Indovina Bank", "Unrestricted Funds", 500000, 0, "Transfer in"),
    make_row(5, "not a date", "VN - Expenses", "Legal & Admin", "abc", 0, "Broken cell"),
    make_row(6, "04/01/24", "VN - Wallet Minh", "", 0, 100000, "Advance"),
    make_row(7, "05/01/24", "", "Unrestricted Funds", 999, 0, "No account"),
    make_row(8, "15/01/24", "VN - Expenses", "Unrestricted Funds", 20000, 0, "Snacks"),
]


class RecordingRenderer:
    def __init__(self):
        self.datasets = []
        self.summaries = []

    def render(self, dataset):
        self.datasets.append(dataset)

    def render_summary(self, report):
        self.summaries.append(report)


@pytest.fixture
def vn_profile():
    return PROFILES["VN"]


@pytest.fixture
def be_profile():
    return PROFILES["BE"]


@pytest.fixture
def source() -> LedgerSource:
    return LedgerSource(VN_HEADER, LEDGER_ROWS, name="VN - Master Ledger")


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def ledger_csv(tmp_path: Path) -> Path:
    path = tmp_path / "vn_ledger.csv"
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(VN_HEADER)
        w.writerows(LEDGER_ROWS)
    return path


@pytest.fixture
def ledger_xlsx(tmp_path: Path) -> Path:
    path = tmp_path / "master_ledger.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.title = "Notes"
    ws["A1"] = "keep me"
    ledger = wb.create_sheet("VN - Master Ledger")
    ledger.append(list(VN_HEADER))
    for r in LEDGER_ROWS:
        ledger.append(list(r))
    wb.save(path)
    return path
