"""
ledger_core.config
Central configuration/constants and ledger profiles.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import ConfigurationError

DEFAULT_INPUT_LEDGER = "master_ledger.xlsx"

# outputs (filenames)
DEFAULT_REPORTS_OUT = "ledger_reports.xlsx"
DEFAULT_PDF_SUMMARY_OUT = "ledger_summary.pdf"

# None -> local time of the machine running the rebuild
REPORT_TIMEZONE: Optional[str] = None

# day-first formats come first: ledgers are kept as dd/mm/yy
DATE_FORMATS = (
    "%d/%m/%y",
    "%d/%m/%Y",
    "%Y-%m-%d",
    "%d-%m-%Y",
    "%d-%m-%y",
    "%d.%m.%Y",
)

# characters a sheet title may not contain
SHEET_UNSAFE_CHARS = "\\/?*[]:"
MAX_SHEET_TITLE = 31

REVENUE_EXPENSE_PATTERN = r"Expense|Revenue"
NUMBER_FORMAT = "#,##0"


class SignConvention(str, Enum):
    """Which side of the ledger counts as money in when deriving ``remaining``."""

    CREDIT_MINUS_DEBIT = "revenue_expense"
    DEBIT_MINUS_CREDIT = "asset"

    def remaining(self, total_debit: float, total_credit: float) -> float:
        if self is SignConvention.CREDIT_MINUS_DEBIT:
            return total_credit - total_debit
        return total_debit - total_credit


@dataclass(frozen=True)
class LedgerProfile:
    name: str
    ledger_sheet: str
    debit_column: str
    credit_column: str
    revenue_expense_labels: Tuple[str, ...]
    currency: str
    fund_convention: SignConvention
    # the consolidated summary nets funds as credit - debit for every ledger
    fund_summary_convention: SignConvention = SignConvention.CREDIT_MINUS_DEBIT
    revenue_expense_convention: SignConvention = SignConvention.CREDIT_MINUS_DEBIT
    asset_convention: SignConvention = SignConvention.DEBIT_MINUS_CREDIT
    account_column: str = "Account"
    fund_column: str = "Funds"
    date_column: str = "Date"
    bank_pattern: str = r"Bank"
    bank_section_title: str = "II. Bank Accounts"
    fund_sheet_prefix: str = "Fund - "
    summary_sheet: str = "Summary"
    organization: str = ""

    def is_revenue_expense(self, account) -> bool:
        return bool(re.search(REVENUE_EXPENSE_PATTERN, str(account or ""), flags=re.IGNORECASE))

    def account_convention(self, account: str) -> SignConvention:
        if account in self.revenue_expense_labels or self.is_revenue_expense(account):
            return self.revenue_expense_convention
        return self.asset_convention


# VN funds: debit is money in. BE funds: credit is money in.
PROFILES: Dict[str, LedgerProfile] = {
    "VN": LedgerProfile(
        name="VN",
        ledger_sheet="VN - Master Ledger",
        debit_column="Debit (VND)",
        credit_column="Credit (VND)",
        revenue_expense_labels=("VN - Expenses", "VN - Revenues"),
        currency="VND",
        fund_convention=SignConvention.DEBIT_MINUS_CREDIT,
        bank_pattern=r"Indovina",
        bank_section_title="II. Indovina Bank Accounts",
        organization="THREE MONKEYS WILDLIFE CONSERVANCY",
    ),
    "BE": LedgerProfile(
        name="BE",
        ledger_sheet="BE - Master Ledger",
        debit_column="Debit (EUR)",
        credit_column="Credit (EUR)",
        revenue_expense_labels=("BE - Expenses", "BE - Revenues"),
        currency="EUR",
        fund_convention=SignConvention.CREDIT_MINUS_DEBIT,
        organization="THREE MONKEYS WILDLIFE CONSERVANCY",
    ),
}

DEFAULT_PROFILE = "VN"


def get_profile(name: str) -> LedgerProfile:
    key = (name or "").strip().upper()
    if key not in PROFILES:
        raise ConfigurationError(f"Unknown ledger profile '{name}'. Choose from: {sorted(PROFILES)}")
    return PROFILES[key]
