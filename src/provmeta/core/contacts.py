# contacts.py
# SPDX-License-Identifier: MIT
"""Split "name + address" strings into validated contacts.

Handles ``Name <email>``, ``Name (email)``, obfuscated addresses such as
``Name (user AT example DOT com)``, the reversed ``email (Name)`` form and
bare names or addresses.
"""

from __future__ import annotations

import re
from typing import Iterable, NamedTuple, Optional

from .config import RemapTable
from .log import get_logger

log = get_logger(__name__)

__all__ = ["Contact", "parse_contact", "parse_contacts", "is_valid_email"]


class Contact(NamedTuple):
    name: Optional[str]
    email: Optional[str]


_AT = r"(?:\s+(?:AT|at)\s+|\s*\[(?:AT|at)\]\s*|\s*\*\s*)"
_DOT = r"(?:\s+(?:DOT|dot)\s+|\s*\[(?:DOT|dot)\]\s*|\s*\.\s*)"
_PART = r"[^\s()<>\[\]*@]+?"

_BRACKETED_RE = re.compile(r"^(?P<name>.*?)\s*[<(](?P<email>[^\s()<>]+@[^\s()<>]+)[>)]")
_OBFUSCATED_TLD_RE = re.compile(
    r"^(?P<name>.*?)\s*[<(]\s*(?P<user>" + _PART + r")" + _AT
    + r"(?P<domain>" + _PART + r")" + _DOT + r"(?P<tld>[^\s()<>\[\]*@.]+)\s*[>)]"
)
_OBFUSCATED_RE = re.compile(
    r"^(?P<name>.*?)\s*[<(]\s*(?P<user>" + _PART + r")" + _AT
    + r"(?P<domain>[^\s()<>\[\]*@]+)\s*[>)]"
)
_REVERSED_RE = re.compile(r"^[<(]?(?P<email>[^\s()<>]+@[^\s()<>]+?)[>)]?\s*[(<](?P<name>[^()<>]*)[)>]")
_BARE_EMAIL_RE = re.compile(r"[^\s()<>,;]+@[^\s()<>,;]+")

_NAME_RE = re.compile(r"[^:0-9<>()]*[^:0-9<>()\s][^:0-9<>()]*")

# Dot-atom local part and hostname labels; the domain needs at least one dot.
_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,63}$"
)


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def _crack(line: str) -> tuple[Optional[str], Optional[str]]:
    m = _BRACKETED_RE.match(line)
    if m:
        return m.group("name"), m.group("email")
    m = _OBFUSCATED_TLD_RE.match(line)
    if m:
        return m.group("name"), f"{m.group('user')}@{m.group('domain')}.{m.group('tld')}"
    m = _OBFUSCATED_RE.match(line)
    if m:
        return m.group("name"), f"{m.group('user')}@{m.group('domain')}"
    m = _REVERSED_RE.match(line)
    if m:
        return m.group("name"), m.group("email")
    m = _BARE_EMAIL_RE.search(line)
    if m:
        return None, m.group(0)
    return line, None


def _clean_name(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    m = _NAME_RE.search(name)
    if not m:
        return None
    cleaned = m.group(0).strip().strip(",;\"'").strip()
    return cleaned or None


def _clean_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    email = email.strip().strip("<>()[],;.")
    if not is_valid_email(email):
        log.debug("Discarding invalid email %r", email)
        return None
    return email.lower()


def parse_contact(line: Optional[str], remap: RemapTable | None = None) -> Optional[Contact]:
    """Parse one free-text contact line.

    Args:
        line: Text such as ``Jane Doe <jane@example.com>``.
        remap: Optional name remap table; a name remapped to "drop" drops the
            whole contact.

    Returns:
        Optional[Contact]: The contact, or None when neither a name nor a
        valid email survives.
    """
    if not line or not line.strip():
        return None
    raw_name, raw_email = _crack(line.strip())
    name = _clean_name(raw_name)
    email = _clean_email(raw_email)
    if name and remap is not None:
        found, replacement = remap.lookup(name)
        if found and replacement is None:
            log.debug("Dropping contact %r via name remap", name)
            return None
        name = replacement
    if not name and not email:
        return None
    return Contact(name, email)


def _split_line(line: str) -> list[str]:
    """Split a line holding several comma-separated addresses.

    A line is only split when it carries more than one ``@`` or obfuscated
    ``AT``, so ``Doe, Jane <jane@example.com>`` stays whole.
    """
    marks = len(re.findall(r"@|" + _AT, line))
    if marks < 2:
        return [line]
    parts: list[str] = []
    depth = 0
    current = []
    for ch in line:
        if ch in "(<":
            depth += 1
        elif ch in ")>":
            depth = max(0, depth - 1)
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [p for p in (part.strip() for part in parts) if p]


def parse_contacts(lines: Iterable[str], remap: RemapTable | None = None) -> list[Contact]:
    """Parse several contact lines, dropping empties and duplicates."""
    out: list[Contact] = []
    for line in lines:
        for part in _split_line(line):
            contact = parse_contact(part, remap)
            if contact is not None and contact not in out:
                out.append(contact)
    return out
