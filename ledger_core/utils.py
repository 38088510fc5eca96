"""
ledger_core.utils
Small reusable helpers.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .config import REPORT_TIMEZONE


def normalize_spaces(text: str) -> str:
    return " ".join((text or "").split()).strip()


def fmt_amount(n: float, currency: str = "") -> str:
    s = f"{n:,.0f}" if float(n).is_integer() else f"{n:,.2f}"
    return f"{s} {currency}".strip()


def now_local(tz_name: Optional[str] = REPORT_TIMEZONE) -> datetime:
    if not tz_name:
        return datetime.now()
    try:
        return datetime.now(ZoneInfo(tz_name))
    except Exception:
        return datetime.now()


def timestamp_line(prefix: str = "Generated on") -> str:
    return f"{prefix}: {now_local().strftime('%Y-%m-%d %H:%M:%S')}"
