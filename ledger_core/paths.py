"""
ledger_core.paths
Output folder helpers.
"""
from __future__ import annotations
from pathlib import Path

OUTPUT_DIR = Path("output")


def out_path(kind: str, filename: str, base: Path | None = None) -> Path:
    root = (base or Path(".")) / OUTPUT_DIR
    k = kind.lower()
    if k not in ("xlsx", "pdf", "logs"):
        raise ValueError(f"Unknown output kind: {kind}")
    folder = root / k
    folder.mkdir(parents=True, exist_ok=True)
    return folder / filename
