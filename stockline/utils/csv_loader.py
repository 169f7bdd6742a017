"""Read uploaded CSV files into row dicts."""

import csv
import io
from typing import Any


def _normalize_row(row: dict[str | None, Any]) -> dict[str, str]:
    """Lower-case header keys and strip cell whitespace; drop overflow columns."""
    out: dict[str, str] = {}
    for key, value in row.items():
        if key is None:
            continue
        out[key.strip().lower()] = (value or "").strip() if isinstance(value, str) else ""
    return out


def read_csv_text(text: str) -> tuple[list[str], list[dict[str, str]]]:
    """Parse CSV text; return (lower-cased header, row dicts in file order)."""
    reader = csv.DictReader(io.StringIO(text.strip()))
    header = [h.strip().lower() for h in (reader.fieldnames or [])]
    return header, [_normalize_row(r) for r in reader]

