#!/usr/bin/env python3
"""
Delimited-Text Tokenizer
Detects the field delimiter of a text export (comma, semicolon, tab or the
"two or more spaces" convention) and splits it into rows of trimmed fields,
keeping double-quoted spans intact.
"""

import csv
import io
import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

TWO_SPACE = "  "
CANDIDATE_DELIMITERS = (",", ";", "\t")
SAMPLE_LINES = 5


def _non_empty_lines(text: str) -> List[str]:
    return [line for line in text.splitlines() if line.strip()]


def split_two_space_line(line: str) -> List[str]:
    """
    Split a line on runs of two or more spaces found outside double quotes.

    Args:
        line: One line of text

    Returns:
        Trimmed fields with surrounding quotes removed and "" unescaped
    """
    fields = []
    buf = []
    in_quote = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '"':
            if line[i + 1:i + 2] == '"':
                buf.append('"')
                i += 2
                continue
            in_quote = not in_quote
            i += 1
            continue
        if not in_quote and ch == " " and line[i + 1:i + 2] == " ":
            j = i + 2
            while j < len(line) and line[j] == " ":
                j += 1
            fields.append("".join(buf))
            buf = []
            i = j
            continue
        buf.append(ch)
        i += 1
    fields.append("".join(buf))
    return [field.strip() for field in fields]


def split_delimited_line(line: str, delimiter: str) -> List[str]:
    """Split one line on a single-character delimiter, honoring quotes."""
    if delimiter == TWO_SPACE:
        return split_two_space_line(line)
    reader = csv.reader([line], delimiter=delimiter, quotechar='"', doublequote=True, skipinitialspace=True)
    return [field.strip() for field in next(reader, [])]


def looks_two_space_delimited(text: str) -> bool:
    """True when the first non-empty line reads as a two-space separated record."""
    lines = _non_empty_lines(text)
    if not lines:
        return False
    first = lines[0].strip()
    fields = split_two_space_line(first)
    return len(fields) >= 3 and first.count(",") <= 1 and first.count("\t") == 0


def detect_delimiter(sample: str) -> str:
    """
    Detect the field delimiter of a text export.

    Args:
        sample: Raw file content (only the first non-empty lines are inspected)

    Returns:
        One of ",", ";", "\\t" or TWO_SPACE
    """
    if looks_two_space_delimited(sample):
        return TWO_SPACE

    head = "\n".join(_non_empty_lines(sample)[:SAMPLE_LINES])
    best = ","
    best_count = -1
    for delimiter in CANDIDATE_DELIMITERS:
        count = head.count(delimiter)
        if count > best_count:
            best, best_count = delimiter, count
    return best


def tokenize(text: str, delimiter: Optional[str] = None) -> List[List[str]]:
    """
    Split raw text into rows of trimmed fields.

    Args:
        text: Raw file content
        delimiter: Delimiter to use; detected when omitted

    Returns:
        Rows with at least one non-empty field
    """
    if delimiter is None:
        delimiter = detect_delimiter(text)

    if delimiter == TWO_SPACE:
        rows = [split_two_space_line(line.strip()) for line in _non_empty_lines(text)]
        return [row for row in rows if any(row)]

    rows = []
    reader = csv.reader(
        io.StringIO(text.replace("\x00", "")),
        delimiter=delimiter,
        quotechar='"',
        doublequote=True,
        skipinitialspace=True,
    )
    while True:
        try:
            record = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            logger.debug(f"Skipping malformed record near line {reader.line_num}: {e}")
            continue
        fields = [field.strip() for field in record]
        if any(fields):
            rows.append(fields)
    return rows


def sniff(text: str) -> Tuple[str, List[List[str]]]:
    """Return the detected delimiter together with the raw rows, without interpretation."""
    delimiter = detect_delimiter(text)
    rows = tokenize(text, delimiter)
    logger.info(f"Detected delimiter {describe_delimiter(delimiter)} with {len(rows)} rows")
    return delimiter, rows


def describe_delimiter(delimiter: str) -> str:
    names = {",": "comma", ";": "semicolon", "\t": "tab", TWO_SPACE: "two-space"}
    return names.get(delimiter, repr(delimiter))
