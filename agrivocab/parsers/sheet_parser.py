"""Parse the exported word sheet (CSV or TSV) into WordRecord objects.

Expected columns, in order:
  | category | english | korean | example1 | example2 | example3 | frequency | difficulty |

The first line is a header. A table containing any tab is read as TSV,
otherwise as CSV with double-quote enclosure.
"""
from __future__ import annotations

import re

from agrivocab.models import WordRecord

COLUMNS = 8
DEFAULT_DIFFICULTY = 2


def parse_csv_line(line: str) -> list[str]:
    """Split one CSV line on commas that are not inside double quotes."""
    fields: list[str] = []
    current = ""
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append(current.strip())
            current = ""
        else:
            current += char
    fields.append(current.strip())
    return fields


def parse_difficulty(raw: str) -> int:
    m = re.match(r"\s*([+-]?\d+)", raw)
    if not m:
        return DEFAULT_DIFFICULTY
    return int(m.group(1)) or DEFAULT_DIFFICULTY


def _clean(field: str) -> str:
    field = field.strip()
    if field.startswith('"'):
        field = field[1:]
    if field.endswith('"'):
        field = field[:-1]
    return field


def parse_catalog(text: str) -> list[WordRecord]:
    lines = [line.strip() for line in text.splitlines()[1:]]
    lines = [line for line in lines if line]
    tabbed = "\t" in text

    records: list[WordRecord] = []
    for line in lines:
        cols = line.split("\t") if tabbed else parse_csv_line(line)
        if len(cols) < COLUMNS:
            continue
        category, english, korean, ex1, ex2, ex3, frequency = (_clean(c) for c in cols[:7])
        records.append(WordRecord(
            index=len(records),
            category=category,
            english=english,
            korean=korean,
            example1=ex1,
            example2=ex2,
            example3=ex3,
            frequency=frequency,
            difficulty=parse_difficulty(cols[7]),
        ))

    return records
