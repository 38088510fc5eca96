"""
ledger_core.rebuild
Report rebuild runners: load -> filter -> group -> sort -> total -> emit.

Missing columns abort the whole rebuild before anything is rendered.
A named report with no rows is recorded in RebuildResult.not_found and skipped.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .config import LedgerProfile
from .errors import ConfigurationError, NotFoundError
from .grouping import filter_rows, group_rows, resolve_bucket
from .io_ledger import LedgerSource
from .parsing import ParseStats
from .summaries import (
    ACCOUNT_REPORT,
    FUND_REPORT,
    ReportDataset,
    SummaryReport,
    build_account_summary,
    build_fund_summary,
    build_report_dataset,
)

log = logging.getLogger(__name__)

MODES = ("all", "single")


class ReportRenderer(Protocol):
    def render(self, dataset: ReportDataset) -> None: ...

    def render_summary(self, report: SummaryReport) -> None: ...


@dataclass(frozen=True)
class RebuildRequest:
    mode: str = "all"
    target_key: Optional[str] = None

    def __post_init__(self):
        if self.mode not in MODES:
            raise ConfigurationError(f"Unknown rebuild mode '{self.mode}'. Choose from: {list(MODES)}")
        if self.mode == "single" and not (self.target_key or "").strip():
            raise ConfigurationError("A single-report rebuild needs a target name")

    @classmethod
    def single(cls, name: str) -> "RebuildRequest":
        return cls(mode="single", target_key=name)


@dataclass
class RebuildResult:
    datasets: List[ReportDataset] = field(default_factory=list)
    not_found: List[str] = field(default_factory=list)
    parse_stats: ParseStats = field(default_factory=ParseStats)

    @property
    def ok(self) -> bool:
        return not self.not_found

    @property
    def message(self) -> str:
        if self.not_found:
            names = ", ".join(f"'{n}'" for n in self.not_found)
            return f"No data found for {names} in the master ledger."
        if not self.datasets:
            return "No reports found in the master ledger."
        if len(self.datasets) == 1:
            return f"'{self.datasets[0].key}' updated successfully!"
        return f"All {len(self.datasets)} report(s) updated successfully!"


def _select(groups: Dict[str, List[Sequence[Any]]], request: RebuildRequest,
            prefix: str, result: RebuildResult) -> List[str]:
    if request.mode == "all":
        return list(groups)

    name = request.target_key.strip()
    try:
        return [resolve_bucket(groups, name)]
    except NotFoundError as e:
        missing = e
    # a sheet name was given: retry with the report prefix removed
    if prefix and name.startswith(prefix):
        try:
            return [resolve_bucket(groups, name[len(prefix):].strip())]
        except NotFoundError as e:
            missing = e
    log.warning("%s", missing)
    result.not_found.append(missing.name)
    return []


def _emit(result: RebuildResult, renderer: Optional[ReportRenderer]) -> RebuildResult:
    if renderer is not None:
        for ds in result.datasets:
            renderer.render(ds)
    if result.parse_stats.total:
        log.debug(
            "Absorbed %d unparseable currency cell(s) and %d unparseable date(s)",
            result.parse_stats.currency_failures,
            result.parse_stats.date_failures,
        )
    log.info(result.message)
    return result


def rebuild_fund_reports(
    source: LedgerSource,
    profile: LedgerProfile,
    renderer: Optional[ReportRenderer] = None,
    request: Optional[RebuildRequest] = None,
) -> RebuildResult:
    request = request or RebuildRequest()
    source.require([profile.fund_column, profile.account_column, profile.date_column,
                    profile.debit_column, profile.credit_column])
    header = source.get_header()

    relevant = filter_rows(
        source.get_rows(), header, profile.account_column,
        allowed=profile.revenue_expense_labels, group_column=profile.fund_column,
    )
    groups = group_rows(relevant, header, profile.fund_column)
    log.info("Fund rebuild (%s): %d fund(s) from %d row(s)", request.mode, len(groups), len(relevant))

    result = RebuildResult()
    for fund in _select(groups, request, profile.fund_sheet_prefix, result):
        result.datasets.append(build_report_dataset(
            fund, FUND_REPORT, header, groups[fund], profile, profile.fund_convention, result.parse_stats,
        ))
    return _emit(result, renderer)


def rebuild_account_reports(
    source: LedgerSource,
    profile: LedgerProfile,
    renderer: Optional[ReportRenderer] = None,
    request: Optional[RebuildRequest] = None,
) -> RebuildResult:
    request = request or RebuildRequest()
    source.require([profile.account_column, profile.date_column,
                    profile.debit_column, profile.credit_column])
    header = source.get_header()

    accounts = filter_rows(source.get_rows(), header, profile.account_column)
    groups = group_rows(accounts, header, profile.account_column)
    log.info("Account rebuild (%s): %d account(s) from %d row(s)", request.mode, len(groups), len(accounts))

    result = RebuildResult()
    for account in _select(groups, request, "", result):
        result.datasets.append(build_report_dataset(
            account, ACCOUNT_REPORT, header, groups[account], profile,
            profile.account_convention(account), result.parse_stats,
        ))
    return _emit(result, renderer)


def build_summary(source: LedgerSource, profile: LedgerProfile,
                  stats: Optional[ParseStats] = None) -> SummaryReport:
    source.require([profile.account_column, profile.fund_column,
                    profile.debit_column, profile.credit_column])
    header = source.get_header()
    rows = source.get_rows()

    accounts = group_rows(filter_rows(rows, header, profile.account_column), header, profile.account_column)
    fund_rows = [
        r for r in filter_rows(rows, header, profile.account_column, group_column=profile.fund_column)
        if profile.is_revenue_expense(r[header.index(profile.account_column)])
    ]
    funds = group_rows(fund_rows, header, profile.fund_column)

    return SummaryReport(
        accounts=build_account_summary(accounts, header, profile, stats),
        funds=build_fund_summary(funds, header, profile, stats),
    )


def rebuild_summary(source: LedgerSource, profile: LedgerProfile,
                    renderer: Optional[ReportRenderer] = None) -> SummaryReport:
    stats = ParseStats()
    report = build_summary(source, profile, stats)
    if renderer is not None:
        renderer.render_summary(report)
    log.info("Summary rebuilt: %d account(s), %d fund(s)",
             sum(len(s.lines) for s in report.accounts), len(report.funds.lines))
    return report
