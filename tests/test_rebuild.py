import pytest

from ledger_core.config import SignConvention
from ledger_core.errors import ConfigurationError
from ledger_core.io_ledger import LedgerSource
from ledger_core.rebuild import (
    RebuildRequest,
    rebuild_account_reports,
    rebuild_fund_reports,
    rebuild_summary,
)
from ledger_core.summaries import ACCOUNT_REPORT, FUND_REPORT

from tests.conftest import LEDGER_ROWS, VN_HEADER, make_row


def test_full_fund_rebuild(source, vn_profile, renderer):
    result = rebuild_fund_reports(source, vn_profile, renderer)

    assert result.ok
    assert [ds.key for ds in result.datasets] == ["Unrestricted Funds", "Legal & Admin"]
    assert renderer.datasets == result.datasets

    unrestricted = result.datasets[0]
    assert unrestricted.kind == FUND_REPORT
    assert unrestricted.header == VN_HEADER
    assert [r[0] for r in unrestricted.rows] == [2, 1, 8]
    assert unrestricted.convention is SignConvention.DEBIT_MINUS_CREDIT
    assert unrestricted.totals.total_debit == 120000
    assert unrestricted.totals.total_credit == 500000
    assert unrestricted.totals.remaining == -380000


def test_fund_rebuild_only_takes_allowed_rows_with_a_fund(source, vn_profile):
    result = rebuild_fund_reports(source, vn_profile)
    emitted = sorted(r[0] for ds in result.datasets for r in ds.rows)
    expected = sorted(
        r[0] for r in LEDGER_ROWS
        if r[2] in vn_profile.revenue_expense_labels and str(r[3]).strip()
    )
    assert emitted == expected


def test_rebuild_is_idempotent(source, vn_profile):
    first = rebuild_fund_reports(source, vn_profile)
    second = rebuild_fund_reports(source, vn_profile)
    assert first.datasets == second.datasets


def test_fund_sign_convention_follows_profile(source, be_profile, vn_profile):
    be_source = LedgerSource(
        [h.replace("VND", "EUR") for h in VN_HEADER],
        [tuple(c.replace("VN - ", "BE - ") if isinstance(c, str) else c for c in r) for r in LEDGER_ROWS],
    )
    be = rebuild_fund_reports(be_source, be_profile).datasets[0]
    vn = rebuild_fund_reports(source, vn_profile).datasets[0]
    assert be.totals.remaining == 380000
    assert vn.totals.remaining == -380000


@pytest.mark.parametrize("name", ["Legal & Admin", "Fund - Legal & Admin", "Legal  Admin", "  Legal & Admin "])
def test_single_fund_rebuild_resolves_name(source, vn_profile, renderer, name):
    result = rebuild_fund_reports(source, vn_profile, renderer, RebuildRequest.single(name))
    assert result.ok
    assert [ds.key for ds in result.datasets] == ["Legal & Admin"]
    assert len(renderer.datasets) == 1
    assert result.message == "'Legal & Admin' updated successfully!"


def test_single_rebuild_with_no_rows_is_reported_not_raised(source, vn_profile, renderer):
    result = rebuild_fund_reports(source, vn_profile, renderer, RebuildRequest.single("Fund - Ghost Fund"))
    assert not result.ok
    assert result.not_found == ["Ghost Fund"]
    assert result.datasets == []
    assert renderer.datasets == []
    assert "No data found" in result.message


def test_fund_excluded_by_allow_list_is_not_found(source, vn_profile):
    # row 7 has this fund but no account, row 4 is a bank row
    only_bank = LedgerSource(VN_HEADER, [LEDGER_ROWS[3], LEDGER_ROWS[6]])
    result = rebuild_fund_reports(only_bank, vn_profile, request=RebuildRequest.single("Unrestricted Funds"))
    assert result.not_found == ["Unrestricted Funds"]


def test_missing_account_column_is_fatal(vn_profile, renderer):
    header = [h for h in VN_HEADER if h != "Account"]
    rows = [r[:2] + r[3:] for r in LEDGER_ROWS]
    broken = LedgerSource(header, rows, name="VN - Master Ledger")

    with pytest.raises(ConfigurationError, match="Account"):
        rebuild_fund_reports(broken, vn_profile, renderer)
    with pytest.raises(ConfigurationError):
        rebuild_account_reports(broken, vn_profile, renderer)
    with pytest.raises(ConfigurationError):
        rebuild_summary(broken, vn_profile, renderer)
    assert renderer.datasets == []
    assert renderer.summaries == []


def test_missing_debit_column_is_fatal(vn_profile):
    header = ["Date", "Account", "Funds", "Credit (VND)"]
    with pytest.raises(ConfigurationError, match="Debit"):
        rebuild_fund_reports(LedgerSource(header, []), vn_profile)


def test_request_validation():
    with pytest.raises(ConfigurationError):
        RebuildRequest(mode="single")
    with pytest.raises(ConfigurationError):
        RebuildRequest(mode="some")
    assert RebuildRequest().mode == "all"


def test_account_rebuild_picks_convention_per_account(source, vn_profile, renderer):
    result = rebuild_account_reports(source, vn_profile, renderer)
    by_key = {ds.key: ds for ds in result.datasets}

    assert list(by_key) == ["VN - Expenses", "VN - Revenues", "VN - Indovina Bank", "VN - Wallet Minh"]
    assert all(ds.kind == ACCOUNT_REPORT for ds in result.datasets)

    expenses = by_key["VN - Expenses"]
    assert expenses.convention is SignConvention.CREDIT_MINUS_DEBIT
    assert [r[0] for r in expenses.rows] == [3, 1, 8, 5]
    assert expenses.totals.remaining == pytest.approx(-370000)

    bank = by_key["VN - Indovina Bank"]
    assert bank.convention is SignConvention.DEBIT_MINUS_CREDIT
    assert bank.totals.remaining == 500000


def test_single_account_rebuild(source, vn_profile):
    result = rebuild_account_reports(source, vn_profile, request=RebuildRequest.single("VN - Wallet Minh"))
    assert [ds.key for ds in result.datasets] == ["VN - Wallet Minh"]
    assert result.datasets[0].totals.remaining == -100000


def test_parse_problems_are_counted_not_raised(source, vn_profile):
    result = rebuild_fund_reports(source, vn_profile)
    assert result.parse_stats.currency_failures == 1
    assert result.parse_stats.date_failures == 1


def test_summary_rebuild(source, vn_profile, renderer):
    report = rebuild_summary(source, vn_profile, renderer)
    assert renderer.summaries == [report]
    assert [s.title for s in report.accounts] == [
        "I. Revenues & Expenses", "II. Indovina Bank Accounts", "III. Custodian Accounts",
    ]
    assert [ln.name for ln in report.funds.lines] == ["Unrestricted Funds", "Legal & Admin"]
    assert report.funds.grand_total.total_credit == 500000


def test_fund_named_like_a_sheet_matches_exactly(vn_profile):
    rows = [
        make_row(1, "01/01/24", "VN - Expenses", "Fund - Rangers", 10, 0),
        make_row(2, "02/01/24", "VN - Expenses", "Rangers", 20, 0),
    ]
    src = LedgerSource(VN_HEADER, rows)

    exact = rebuild_fund_reports(src, vn_profile, request=RebuildRequest.single("Fund - Rangers"))
    assert [ds.key for ds in exact.datasets] == ["Fund - Rangers"]
    assert exact.datasets[0].totals.total_debit == 10

    by_sheet = rebuild_fund_reports(src, vn_profile, request=RebuildRequest.single("Fund - Fund - Rangers"))
    assert [ds.key for ds in by_sheet.datasets] == ["Fund - Rangers"]


def test_empty_ledger_reports_nothing_found(vn_profile):
    result = rebuild_fund_reports(LedgerSource(VN_HEADER, []), vn_profile)
    assert result.datasets == []
    assert result.message == "No reports found in the master ledger."
