"""
ledger_core.parsing
Date/amount parsing. Both parsers are total: bad cells become 0 or an invalid-date sentinel.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

from .config import DATE_FORMATS

INVALID_DATE = datetime.max

_NOT_NUMERIC = re.compile(r"[^\d\-.,]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


@dataclass
class ParseStats:
    currency_failures: int = 0
    date_failures: int = 0

    @property
    def total(self) -> int:
        return self.currency_failures + self.date_failures


def clean_currency(value: Any, stats: Optional[ParseStats] = None) -> Union[int, float]:
    if not value:
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value

    s = _NOT_NUMERIC.sub("", str(value))
    if "." in s and "," in s:
        # the separator that comes last is the decimal point
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    else:
        s = s.replace(",", ".", 1)

    m = _LEADING_NUMBER.match(s)
    if not m:
        if stats is not None:
            stats.currency_failures += 1
        return 0
    return float(m.group(0))


def parse_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    s = ("" if value is None else str(value)).strip()
    if not s:
        return None
    s = s.split()[0]
    if "T" in s:
        s = s.split("T")[0]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


def date_sort_key(value: Any, stats: Optional[ParseStats] = None) -> datetime:
    """Sort key for a date cell; unparseable dates sort after every real date."""
    d = parse_date(value)
    if d is None:
        if stats is not None:
            stats.date_failures += 1
        return INVALID_DATE
    return d
