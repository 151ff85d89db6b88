"""Append-only audit log for sheet writes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def write_audit_entry(audit_path: Path, entry: dict[str, Any]) -> None:
    """Append a JSON-lines entry to an audit log file."""
    audit_path.parent.mkdir(parents=True, exist_ok=True)
    with audit_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")


def read_audit_entries(audit_path: Path) -> list[dict[str, Any]]:
    """Read back every entry of a JSON-lines audit file (empty if missing)."""
    if not audit_path.exists():
        return []
    entries: list[dict[str, Any]] = []
    with audit_path.open(encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                entries.append(json.loads(line))
    return entries
