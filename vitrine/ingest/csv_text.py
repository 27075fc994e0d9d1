"""Lenient CSV parsing for spreadsheet exports.

The exports we consume are plain comma separated text where a cell may be
wrapped in double quotes to carry commas. Doubled quotes inside a quoted cell
(``""``) are not treated as an escape: every ``"`` toggles the quoted state and
is dropped.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

BOM = "\ufeff"
_LINE_SPLIT = re.compile(r"\r?\n")
_WHITESPACE = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    return _WHITESPACE.sub(" ", header).strip()


def split_line(line: str) -> list[str]:
    cells: list[str] = []
    current: list[str] = []
    quoted = False
    for ch in line:
        if ch == '"':
            quoted = not quoted
            continue
        if ch == "," and not quoted:
            cells.append("".join(current))
            current = []
            continue
        current.append(ch)
    cells.append("".join(current))
    return cells


def parse_csv(text: str) -> list[dict[str, str]]:
    """Parse CSV text into header-keyed records.

    Rows never raise: short rows are padded with empty strings and surplus
    cells are ignored.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    text = text.strip()
    if not text:
        return []
    lines = _LINE_SPLIT.split(text)
    headers = [normalize_header(h) for h in lines[0].split(",")]
    records: list[dict[str, str]] = []
    for line in lines[1:]:
        if not line:
            continue
        cells = split_line(line)
        records.append(
            {h: (cells[i] if i < len(cells) else "").strip() for i, h in enumerate(headers)}
        )
    return records


def format_csv_row(values: Iterable[str]) -> str:
    """Serialize cells into one line that ``parse_csv`` reads back."""
    return ",".join(f'"{v}"' if "," in v else v for v in values)


def format_csv(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    lines = [format_csv_row(headers)]
    lines.extend(format_csv_row(row) for row in rows)
    return "\n".join(lines) + "\n"
