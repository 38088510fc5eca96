"""
ledger_core.grouping
Row filtering, bucket keys and bucket lookup by name.
"""
from __future__ import annotations
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .config import SHEET_UNSAFE_CHARS
from .errors import NotFoundError
from .utils import normalize_spaces

log = logging.getLogger(__name__)

Row = Sequence[Any]

_UNSAFE = re.compile("[" + re.escape(SHEET_UNSAFE_CHARS) + "]")
_PUNCT = re.compile(r"[^\w\s]")


def normalize_key(value: Any) -> str:
    return "" if value is None else str(value).strip()


def loose_key(value: Any) -> str:
    """Key with sheet-title-unsafe characters replaced by a space."""
    return _UNSAFE.sub(" ", normalize_key(value))


def match_key(value: Any) -> str:
    return normalize_spaces(_PUNCT.sub(" ", loose_key(value)))


def filter_rows(
    rows: Iterable[Row],
    header: Sequence[str],
    column: str,
    allowed: Optional[Iterable[str]] = None,
    group_column: Optional[str] = None,
) -> List[Row]:
    idx = list(header).index(column)
    group_idx = list(header).index(group_column) if group_column else None
    allow = set(allowed) if allowed is not None else None

    out: List[Row] = []
    for r in rows:
        key = normalize_key(r[idx])
        if not key:
            continue
        if group_idx is not None and not normalize_key(r[group_idx]):
            continue
        if allow is not None and key not in allow:
            continue
        out.append(r)
    return out


def group_rows(rows: Iterable[Row], header: Sequence[str], column: str) -> Dict[str, List[Row]]:
    idx = list(header).index(column)
    groups: Dict[str, List[Row]] = {}
    for r in rows:
        key = normalize_key(r[idx])
        if not key:
            continue
        groups.setdefault(key, []).append(r)
    return groups


def resolve_bucket(groups: Dict[str, List[Row]], name: str) -> str:
    """
    Find the bucket key for an externally given report name.
    Tries the exact key first, then the loosely normalized forms.
    Raises NotFoundError when nothing matches.
    """
    wanted = normalize_key(name)
    if wanted in groups and groups[wanted]:
        return wanted

    for fold in (loose_key, match_key):
        target = fold(wanted)
        if not target:
            continue
        hits = [k for k, rows in groups.items() if rows and fold(k) == target]
        if hits:
            if len(hits) > 1:
                log.warning("Name '%s' matches several buckets %s; using '%s'", name, hits, hits[0])
            return hits[0]

    raise NotFoundError(wanted)
