# dates.py
# SPDX-License-Identifier: MIT
"""Resolve free-text dates to ``YYYYMMDD``, ``YYYYMM`` or ``YYYY``.

Year-month-day is tried before day-month-year, first anchored to the whole
string. When neither consumes the whole string, a calendar parse and a loose
(unanchored) regex match compete and the more specific one wins.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Union

from dateutil import parser as date_parser

from .headers import HeaderBlock
from .log import get_logger

log = get_logger(__name__)

__all__ = [
    "resolve_date",
    "resolve_created_date",
    "resolve_updated_date",
    "CREATED_HEADERS",
    "UPDATED_HEADERS",
]

_SEP = r"[-/. ]"

# Digit runs never extend into a neighbouring number; month and day share one separator.
YMD_RE = re.compile(
    r"(?<!\d)(?P<year>\d{4})"
    r"(?:(?P<sep>" + _SEP + r"?)(?P<month>[01]?\d)"
    r"(?:(?P=sep)(?P<day>[0-3]?\d))?)?(?!\d)"
)
DMY_RE = re.compile(
    r"(?<!\d)(?:(?:(?P<day>[0-3]?\d)" + _SEP + r")?(?P<month>[01]?\d)" + _SEP + r")?"
    r"(?P<year>\d{4})(?!\d)"
)

CREATED_HEADERS = ("Created", "Date")
UPDATED_HEADERS = ("Updated", "Last-Updated", "Last-Modified", "Modified", "Time-stamp")

# Two distinct defaults; a field that differs between both parses was not in the input.
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def _format(year: str, month: Optional[str], day: Optional[str]) -> Optional[str]:
    if month is None:
        return year
    if not 1 <= int(month) <= 12:
        return None
    if day is None:
        return f"{year}{int(month):02d}"
    if not 1 <= int(day) <= 31:
        return None
    return f"{year}{int(month):02d}{int(day):02d}"


def _regex_date(value: str, *, anchored: bool) -> Optional[str]:
    for pattern in (YMD_RE, DMY_RE):
        if anchored:
            m = pattern.fullmatch(value)
            matches = [m] if m else []
        else:
            matches = pattern.finditer(value)
        for m in matches:
            out = _format(m.group("year"), m.group("month"), m.group("day"))
            if out:
                return out
    return None


def _calendar_date(value: str) -> Optional[str]:
    try:
        a = date_parser.parse(value, default=_DEFAULT_A, fuzzy=True)
        b = date_parser.parse(value, default=_DEFAULT_B, fuzzy=True)
    except (ValueError, OverflowError):
        return None
    if a.year != b.year:
        return None
    has_month = a.month == b.month
    has_day = a.day == b.day
    if has_month and has_day:
        return a.strftime("%Y%m%d")
    if has_month:
        return a.strftime("%Y%m")
    return f"{a.year:04d}"


def resolve_date(value: Optional[str]) -> Optional[str]:
    """Resolve a date string; None when nothing usable is found."""
    if not value:
        return None
    value = value.strip()
    exact = _regex_date(value, anchored=True)
    if exact:
        return exact
    calendar = _calendar_date(value)
    loose = _regex_date(value, anchored=False)
    if calendar is None and loose is None:
        return None
    if len(loose or "") > len(calendar or ""):
        return loose
    return calendar


def _header_date(text: Union[str, HeaderBlock], names: tuple[str, ...]) -> Optional[str]:
    doc = text if isinstance(text, HeaderBlock) else HeaderBlock(text)
    for name in names:
        raw = doc.get_header(name)
        if not raw:
            continue
        if name == "Time-stamp":
            raw = raw.strip().strip("<>\"")
        resolved = resolve_date(raw)
        if resolved:
            log.debug("Resolved %s header %r to %s", name, raw, resolved)
            return resolved
    return None


def resolve_created_date(text: Union[str, HeaderBlock]) -> Optional[str]:
    """Creation date from a document's ``Created`` (or ``Date``) header."""
    return _header_date(text, CREATED_HEADERS)


def resolve_updated_date(text: Union[str, HeaderBlock]) -> Optional[str]:
    """Last-update date from the first usable update-style header."""
    return _header_date(text, UPDATED_HEADERS)
