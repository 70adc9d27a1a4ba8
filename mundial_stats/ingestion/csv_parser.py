"""
Delimited Text Parser

Turns raw CSV exports into a list of row dicts (column name -> trimmed string).
The parser is best-effort: it never raises for malformed rows.

Rows are split quote-aware first. When that yields fewer fields than the
header declares, the row falls back to a naive split on the delimiter. The
fallback is counted and logged, since it can misplace fields that contain an
unescaped delimiter.

Usage:
    from mundial_stats.ingestion.csv_parser import parse_csv
    rows = parse_csv(text)
"""

import re
from dataclasses import dataclass, field

from mundial_stats.config import CSV_DELIMITER
from mundial_stats.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

LINE_BREAK_RE = re.compile(r"\r\n|\n")
QUOTE = '"'


@dataclass
class ParseReport:
    """Rows parsed from one document plus degraded-mode bookkeeping."""
    rows: list[dict[str, str]] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)
    fallback_lines: list[int] = field(default_factory=list)

    @property
    def fallback_count(self) -> int:
        return len(self.fallback_lines)


def parse_header(line: str, delimiter: str = CSV_DELIMITER) -> list[str]:
    """Split the header line; each name is trimmed and loses one surrounding quote."""
    headers = []
    for raw in line.lstrip("\ufeff").split(delimiter):
        name = raw.strip()
        if name.startswith(QUOTE):
            name = name[1:]
        if name.endswith(QUOTE):
            name = name[:-1]
        headers.append(name)
    return headers


def split_quoted(line: str, delimiter: str = CSV_DELIMITER) -> list[str]:
    """
    Split one line into fields, honouring double-quoted fields.

    A quoted field may contain the delimiter, and ``""`` inside it decodes
    to a literal quote. Whitespace around a quoted field is ignored.
    An unterminated quote swallows the rest of the line.

    Args:
        line: One line of delimited text (no line breaks)
        delimiter: Field separator

    Returns:
        List of trimmed field values
    """
    fields = []
    i = 0
    n = len(line)

    while True:
        # Skip leading whitespace to detect a quoted field
        j = i
        while j < n and line[j] in " \t" and line[j] != delimiter:
            j += 1

        if j < n and line[j] == QUOTE:
            j += 1
            chars = []
            while j < n:
                ch = line[j]
                if ch == QUOTE:
                    if j + 1 < n and line[j + 1] == QUOTE:
                        chars.append(QUOTE)
                        j += 2
                        continue
                    j += 1
                    break
                chars.append(ch)
                j += 1
            value = "".join(chars)
            # Text between the closing quote and the next delimiter is kept
            end = line.find(delimiter, j)
            if end == -1:
                end = n
            value += line[j:end]
        else:
            end = line.find(delimiter, i)
            if end == -1:
                end = n
            value = line[i:end]

        fields.append(value.strip())

        if end >= n:
            break
        i = end + len(delimiter)

    return fields


def split_naive(line: str, delimiter: str = CSV_DELIMITER) -> list[str]:
    """Degraded-mode split: every delimiter separates fields, quotes are literal."""
    return [value.strip() for value in line.split(delimiter)]


def parse_csv_report(text: str, delimiter: str = CSV_DELIMITER) -> ParseReport:
    """
    Parse delimited text and report which lines needed the naive fallback.

    Args:
        text: Raw document; the first line is the header
        delimiter: Field separator

    Returns:
        ParseReport with rows, headers and 1-based fallback line numbers
    """
    report = ParseReport()
    if not text:
        return report

    lines = LINE_BREAK_RE.split(text)
    report.headers = parse_header(lines[0], delimiter)
    width = len(report.headers)

    for line_no, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue

        values = split_quoted(line, delimiter)
        if len(values) < width:
            report.fallback_lines.append(line_no)
            logger.debug(
                f"Line {line_no}: quote-aware split gave {len(values)}/{width} fields, "
                f"using naive split"
            )
            values = split_naive(line, delimiter)

        # Short rows pad with "", extra trailing fields are ignored
        row = {}
        for index, header in enumerate(report.headers):
            row[header] = values[index] if index < len(values) else ""
        report.rows.append(row)

    if report.fallback_count:
        logger.warning(
            f"{report.fallback_count} of {len(report.rows)} rows fell back to naive "
            f"'{delimiter}' splitting (lines {report.fallback_lines[:10]})"
        )

    return report


def parse_csv(text: str, delimiter: str = CSV_DELIMITER) -> list[dict[str, str]]:
    """
    Parse delimited text into row dicts keyed by header name.

    Blank lines are skipped, values are trimmed, missing trailing fields
    become "". Never raises for malformed rows.
    """
    return parse_csv_report(text, delimiter).rows
