"""
ledger_core.io_ledger
Master ledger reading (xlsx via openpyxl, or csv) + column validation.
"""
from __future__ import annotations
import csv
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .errors import ConfigurationError

log = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")


def require_openpyxl():
    try:
        from openpyxl import load_workbook  # noqa
        return load_workbook
    except ImportError:
        raise SystemExit("Missing dependency: openpyxl\nInstall with: pip3 install openpyxl\n")


class LedgerSource:
    """Header + rows of one ledger table. Row 1 of the sheet is the header and is not a row."""

    def __init__(self, header: Sequence[Any], rows: Iterable[Sequence[Any]], name: str = "ledger"):
        self.name = name
        self._header: Tuple[str, ...] = tuple("" if h is None else str(h).strip() for h in header)
        width = len(self._header)
        fitted = []
        for r in rows:
            r = tuple(r)
            if len(r) < width:
                r = r + ("",) * (width - len(r))
            fitted.append(r[:width])
        self._rows: Tuple[Tuple[Any, ...], ...] = tuple(fitted)

    def get_header(self) -> Tuple[str, ...]:
        return self._header

    def get_rows(self) -> Tuple[Tuple[Any, ...], ...]:
        return self._rows

    def column_index(self, name: str) -> int:
        try:
            return self._header.index(name)
        except ValueError:
            raise ConfigurationError(f"Missing '{name}' column in {self.name}") from None

    def require(self, columns: Iterable[str]) -> None:
        missing = [c for c in columns if c not in self._header]
        if missing:
            raise ConfigurationError(f"Missing required columns in {self.name}: {missing}")


def _is_blank(row: Sequence[Any]) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in row)


def load_excel_ledger(xlsx_path: Path, sheet: Optional[str] = None) -> LedgerSource:
    load_workbook = require_openpyxl()
    wb = load_workbook(xlsx_path, data_only=True, read_only=True)
    try:
        if sheet:
            if sheet not in wb.sheetnames:
                raise ConfigurationError(f"'{sheet}' sheet not found in {xlsx_path.name}")
            ws = wb[sheet]
        else:
            ws = wb.worksheets[0]
        values = [tuple(r) for r in ws.iter_rows(values_only=True)]
        title = ws.title
    finally:
        wb.close()

    if not values:
        raise ConfigurationError(f"'{title}' sheet is empty")
    header, body = values[0], values[1:]
    rows = [tuple("" if v is None else v for v in r) for r in body if not _is_blank(r)]
    return LedgerSource(header, rows, name=title)


def load_csv_ledger(csv_path: Path) -> LedgerSource:
    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        reader = csv.reader(f)
        data: List[List[str]] = list(reader)
    if not data:
        raise ConfigurationError(f"{csv_path.name} has no header row")
    rows = [r for r in data[1:] if not _is_blank(r)]
    return LedgerSource(data[0], rows, name=csv_path.stem)


def load_ledger(path: Path, sheet: Optional[str] = None) -> LedgerSource:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Ledger not found: {path}")
    if path.suffix.lower() in EXCEL_SUFFIXES:
        source = load_excel_ledger(path, sheet)
    else:
        source = load_csv_ledger(path)
    log.info("Loaded %d ledger rows from %s (%s)", len(source.get_rows()), path.name, source.name)
    return source
