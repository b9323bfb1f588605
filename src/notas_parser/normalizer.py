#!/usr/bin/env python3
"""
Locale Number & Date Normalizer
Disambiguates Brazilian ("1.234,56") and plain ("1234.56") notation and parses
dd/mm/yyyy as well as ISO dates. Both parsers are total: bad input degrades to
zero or today's date instead of raising.
"""

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")

DMY_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{2}|\d{4})$")
DATE_PATTERN = re.compile(r"\b(\d{2}/\d{2}/(?:\d{4}|\d{2})|\d{4}-\d{2}-\d{2})\b")
NUMBER_TOKEN_PATTERN = re.compile(r"^-?\d[\d.,]*-?$")


def parse_ambiguous_number(text: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Parse a number written either in Brazilian or in plain notation.

    Args:
        text: Raw field content, e.g. "1.234,56", "1234.56", "12,5" or "R$ 10,00"

    Returns:
        The parsed Decimal, or Decimal("0") when nothing numeric can be read
    """
    if text is None:
        return ZERO
    cleaned = re.sub(r"\s+", "", str(text))
    cleaned = re.sub(r"-$", "", cleaned)
    cleaned = re.sub(r"[^\d.,\-]", "", cleaned)
    if not cleaned:
        return ZERO

    has_comma = "," in cleaned
    has_dot = "." in cleaned
    if has_comma and has_dot:
        # Brazilian: dot groups thousands, comma marks decimals
        cleaned = cleaned.replace(".", "").replace(",", ".")
    elif has_comma:
        cleaned = cleaned.replace(",", ".")
    elif has_dot and cleaned.count(".") > 1:
        head, _, tail = cleaned.rpartition(".")
        cleaned = head.replace(".", "") + "." + tail

    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        logger.debug(f"Unreadable number {text!r}, defaulting to 0")
        return ZERO
    if not value.is_finite():
        return ZERO
    return value


def parse_ambiguous_date(text: Optional[str]) -> date:
    """
    Parse dd/mm/yyyy, dd/mm/yy, ISO or other common date spellings.

    Args:
        text: Raw field content

    Returns:
        The parsed calendar date, or today's date when the input is empty or unreadable
    """
    if not text or not str(text).strip():
        return date.today()
    value = str(text).strip()

    match = DMY_PATTERN.match(value)
    if match:
        day, month, year = match.groups()
        full_year = 2000 + int(year) if len(year) == 2 else int(year)
        try:
            return date(full_year, int(month), int(day))
        except ValueError:
            logger.debug(f"Invalid calendar date {value!r}, defaulting to today")
            return date.today()

    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        pass

    try:
        return date_parser.parse(value, dayfirst=True).date()
    except (ValueError, OverflowError):
        logger.debug(f"Unreadable date {value!r}, defaulting to today")
        return date.today()


def find_date_in_text(text: str) -> Optional[date]:
    """Return the first date-shaped token inside text, or None."""
    if not text:
        return None
    match = DATE_PATTERN.search(str(text))
    if not match:
        return None
    return parse_ambiguous_date(match.group(1))


def is_date_like(text: str) -> bool:
    return bool(text) and bool(DATE_PATTERN.search(str(text)))


def is_number_like(token: str) -> bool:
    """True for tokens such as "10", "25,00", "1.234,56" or "100-"."""
    return bool(NUMBER_TOKEN_PATTERN.match(token.strip())) if token else False


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary value to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
