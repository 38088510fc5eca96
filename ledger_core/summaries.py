"""
ledger_core.summaries
Sorting, totals, report datasets and the consolidated summary.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import LedgerProfile, SignConvention
from .parsing import ParseStats, clean_currency, date_sort_key

FUND_REPORT = "fund"
ACCOUNT_REPORT = "account"


@dataclass(frozen=True)
class Totals:
    total_debit: float
    total_credit: float
    remaining: float


@dataclass(frozen=True)
class ReportDataset:
    key: str
    kind: str
    convention: SignConvention
    header: Tuple[str, ...]
    rows: Tuple[Tuple[Any, ...], ...]
    totals: Totals


@dataclass(frozen=True)
class SummaryLine:
    name: str
    total_debit: float
    total_credit: float
    remaining: float


@dataclass
class SummarySection:
    title: str
    convention: SignConvention
    lines: List[SummaryLine] = field(default_factory=list)

    @property
    def grand_total(self) -> Totals:
        debit = sum(ln.total_debit for ln in self.lines)
        credit = sum(ln.total_credit for ln in self.lines)
        return Totals(debit, credit, self.convention.remaining(debit, credit))


@dataclass
class SummaryReport:
    accounts: List[SummarySection]
    funds: SummarySection


def sort_rows_by_date(rows: Sequence[Sequence[Any]], date_index: int,
                      stats: Optional[ParseStats] = None) -> List[Sequence[Any]]:
    # sorted() is stable: equal dates (and all invalid dates) keep source order
    keyed = [(date_sort_key(r[date_index], stats), r) for r in rows]
    return [r for _d, r in sorted(keyed, key=lambda kv: kv[0])]


def compute_totals(
    rows: Sequence[Sequence[Any]],
    debit_index: int,
    credit_index: int,
    convention: SignConvention,
    stats: Optional[ParseStats] = None,
) -> Totals:
    total_debit = sum(clean_currency(r[debit_index], stats) for r in rows)
    total_credit = sum(clean_currency(r[credit_index], stats) for r in rows)
    return Totals(total_debit, total_credit, SignConvention(convention).remaining(total_debit, total_credit))


def build_report_dataset(
    key: str,
    kind: str,
    header: Sequence[str],
    rows: Sequence[Sequence[Any]],
    profile: LedgerProfile,
    convention: SignConvention,
    stats: Optional[ParseStats] = None,
) -> ReportDataset:
    cols = list(header)
    sorted_rows = sort_rows_by_date(rows, cols.index(profile.date_column), stats)
    totals = compute_totals(
        sorted_rows,
        cols.index(profile.debit_column),
        cols.index(profile.credit_column),
        convention,
        stats,
    )
    return ReportDataset(
        key=key,
        kind=kind,
        convention=SignConvention(convention),
        header=tuple(header),
        rows=tuple(tuple(r) for r in sorted_rows),
        totals=totals,
    )


def _line(name: str, rows: Sequence[Sequence[Any]], debit_idx: int, credit_idx: int,
          convention: SignConvention, stats: Optional[ParseStats]) -> SummaryLine:
    t = compute_totals(rows, debit_idx, credit_idx, convention, stats)
    return SummaryLine(name, t.total_debit, t.total_credit, t.remaining)


def build_account_summary(
    groups: Dict[str, List[Sequence[Any]]],
    header: Sequence[str],
    profile: LedgerProfile,
    stats: Optional[ParseStats] = None,
) -> List[SummarySection]:
    cols = list(header)
    debit_idx = cols.index(profile.debit_column)
    credit_idx = cols.index(profile.credit_column)

    rev_exp = SummarySection("I. Revenues & Expenses", profile.revenue_expense_convention)
    bank = SummarySection(profile.bank_section_title, profile.asset_convention)
    custodians = SummarySection("III. Custodian Accounts", profile.asset_convention)

    for account, rows in groups.items():
        if profile.is_revenue_expense(account):
            section = rev_exp
        elif re.search(profile.bank_pattern, account, flags=re.IGNORECASE):
            section = bank
        else:
            section = custodians
        section.lines.append(_line(account, rows, debit_idx, credit_idx, section.convention, stats))

    return [rev_exp, bank, custodians]


def build_fund_summary(
    groups: Dict[str, List[Sequence[Any]]],
    header: Sequence[str],
    profile: LedgerProfile,
    stats: Optional[ParseStats] = None,
) -> SummarySection:
    cols = list(header)
    debit_idx = cols.index(profile.debit_column)
    credit_idx = cols.index(profile.credit_column)
    section = SummarySection("Fund Summary", profile.fund_summary_convention)
    for fund, rows in groups.items():
        section.lines.append(_line(fund, rows, debit_idx, credit_idx, section.convention, stats))
    return section
