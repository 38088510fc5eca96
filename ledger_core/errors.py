"""
ledger_core.errors
Error taxonomy for report rebuilds.
"""
from __future__ import annotations


class LedgerError(Exception):
    pass


class ConfigurationError(LedgerError, ValueError):
    """Fatal: the ledger or the requested rebuild cannot be processed at all."""


class NotFoundError(LedgerError, LookupError):
    """A named bucket has no matching rows. Scoped to that bucket only."""

    def __init__(self, name: str, message: str | None = None):
        self.name = name
        super().__init__(message or f"No data found for '{name}'")
