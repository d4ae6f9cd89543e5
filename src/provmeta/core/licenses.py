# licenses.py
# SPDX-License-Identifier: MIT
"""
License classification for free-text document headers.

Detection order (first hit wins, every stage scans the full text):

1. GNU permission statement.
2. BSD permission statement (clause count decides the variant).
3. MIT permission statement.
4. ISC permission statement.
5. Creative Commons attribution statement.
6. ``License`` header matched as a GNU keyword.
7. External license detector run over a directory.
8. Remote forge metadata for a package.
9. Non-standard, project-specific statements.
10. ``License`` header matched against other keywords.
11. Generic catch-all phrases, skipped when a GNU keyword occurs anywhere.

Detectors return a :class:`PermissionMatch`; :func:`normalize_match` turns it
into a canonical identifier.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional, Union

from .config import ExtractionConfig
from .forge import lookup_remote_license
from .headers import HeaderBlock
from .license_tool import run_license_detector
from .log import get_logger
from .patterns import (
    BSD_ADVERTISING_RE,
    BSD_ENDORSEMENT_RE,
    BSD_STATEMENT_RE,
    CC_STATEMENT_RE,
    CC_VARIANT_CODES,
    GENERIC_STATEMENTS,
    GNU_KEYWORD_RE,
    GNU_STATEMENT_RE,
    GNU_VARIANT_NAMES,
    ISC_STATEMENT_RE,
    KEYWORD_PATTERNS,
    LICENSE_NAME_ABBREVIATIONS,
    MIT_STATEMENT_RE,
    phrase_regexp,
)
from .safe_http import SafeHttpClient

log = get_logger(__name__)

__all__ = [
    "PermissionMatch",
    "detect_gnu_statement",
    "detect_bsd_statement",
    "detect_mit_statement",
    "detect_isc_statement",
    "detect_cc_statement",
    "detect_gnu_keyword",
    "detect_keyword",
    "detect_non_standard",
    "detect_generic_statement",
    "normalize_match",
    "abbreviate_license_name",
    "classify_license",
    "license_url",
]

_LICENSE_HEADERS = ("License", "Licence")


@dataclass(frozen=True)
class PermissionMatch:
    """Transient result of one detector.

    ``kind`` selects the normalizer; the remaining fields are whatever the
    detector captured and are meaningless outside normalization.
    """
    kind: str
    text: str
    variant: Optional[str] = None
    version: Optional[str] = None
    or_later: bool = False
    abbrev: Optional[str] = None
    clauses: int = 0
    identifier: Optional[str] = None


# ---------------------------------------------------------------------------
# Detectors
# ---------------------------------------------------------------------------

def _gnu_match(m: re.Match[str]) -> PermissionMatch:
    return PermissionMatch(
        kind="gnu",
        text=m.group(0),
        variant=m.group("variant"),
        version=m.group("version"),
        or_later=bool(m.group("later")),
        abbrev=m.group("abbrev"),
    )


def detect_gnu_statement(text: str) -> PermissionMatch | None:
    m = GNU_STATEMENT_RE.search(text)
    return _gnu_match(m) if m else None


def detect_gnu_keyword(value: str) -> PermissionMatch | None:
    m = GNU_KEYWORD_RE.search(value)
    return _gnu_match(m) if m else None


def detect_bsd_statement(text: str) -> PermissionMatch | None:
    """Match the BSD redistribution sentence and count its optional clauses.

    The advertising and no-endorsement clauses are looked for after the start
    of the redistribution sentence.
    """
    m = BSD_STATEMENT_RE.search(text)
    if not m:
        return None
    clauses = 2
    if BSD_ADVERTISING_RE.search(text, m.start()):
        clauses += 1
    if BSD_ENDORSEMENT_RE.search(text, m.start()):
        clauses += 1
    return PermissionMatch(kind="bsd", text=m.group(0), clauses=clauses)


def detect_mit_statement(text: str) -> PermissionMatch | None:
    m = MIT_STATEMENT_RE.search(text)
    if not m:
        return None
    return PermissionMatch(kind="mit", text=m.group(0), variant="expat" if m.group("expat") else "x11")


def detect_isc_statement(text: str) -> PermissionMatch | None:
    m = ISC_STATEMENT_RE.search(text)
    if not m:
        return None
    return PermissionMatch(kind="isc", text=m.group(0), variant="and/or" if m.group("andor") else "and")


def detect_cc_statement(text: str) -> PermissionMatch | None:
    m = CC_STATEMENT_RE.search(text)
    if not m:
        return None
    return PermissionMatch(kind="cc", text=m.group(0), variant=m.group("variant"), version=m.group("version"))


def detect_keyword(value: str) -> PermissionMatch | None:
    """Match a ``License`` header value against the non-GNU keyword table."""
    for pattern, identifier, versioned in KEYWORD_PATTERNS:
        m = pattern.search(value)
        if m:
            version = m.groupdict().get("version") if versioned else None
            return PermissionMatch(kind="keyword", text=m.group(0), version=version, identifier=identifier)
    return None


def detect_non_standard(text: str, statements: tuple[tuple[str, str], ...]) -> PermissionMatch | None:
    for literal, identifier in statements:
        m = phrase_regexp(literal).search(text)
        if m:
            return PermissionMatch(kind="literal", text=m.group(0), identifier=identifier)
    return None


def detect_generic_statement(text: str) -> PermissionMatch | None:
    for pattern, identifier in GENERIC_STATEMENTS:
        m = pattern.search(text)
        if m:
            return PermissionMatch(kind="literal", text=m.group(0), identifier=identifier)
    return None


# ---------------------------------------------------------------------------
# Normalizers
# ---------------------------------------------------------------------------

def _normalize_gnu(match: PermissionMatch) -> str:
    if match.abbrev:
        name = match.abbrev.upper()
    else:
        name = GNU_VARIANT_NAMES[match.variant.lower() if match.variant else None]
    if match.version:
        name += f"-{match.version}"
    if match.or_later:
        name += "+"
    return name


def _normalize_bsd(match: PermissionMatch) -> str:
    return f"BSD-{min(match.clauses, 4)}-clause"


def _normalize_mit(match: PermissionMatch) -> str:
    return f"MIT ({match.variant})"


def _normalize_isc(match: PermissionMatch) -> str:
    return f"ISC ({match.variant})"


def _normalize_cc(match: PermissionMatch) -> Optional[str]:
    key = re.sub(r"[-\s]", "", (match.variant or "").lower())
    code = CC_VARIANT_CODES.get(key)
    if code is None or not match.version:
        return None
    return f"CC-{code}-{match.version}"


def _normalize_keyword(match: PermissionMatch) -> Optional[str]:
    if not match.identifier:
        return None
    if match.version:
        return f"{match.identifier}-{match.version}"
    return match.identifier


def _normalize_literal(match: PermissionMatch) -> Optional[str]:
    return match.identifier


_NORMALIZERS: dict[str, Callable[[PermissionMatch], Optional[str]]] = {
    "gnu": _normalize_gnu,
    "bsd": _normalize_bsd,
    "mit": _normalize_mit,
    "isc": _normalize_isc,
    "cc": _normalize_cc,
    "keyword": _normalize_keyword,
    "literal": _normalize_literal,
}


def normalize_match(match: PermissionMatch | None) -> Optional[str]:
    """Turn a detector result into a canonical identifier."""
    if match is None:
        return None
    normalizer = _NORMALIZERS.get(match.kind)
    if normalizer is None:
        raise ValueError(f"Unknown permission match kind: {match.kind!r}")
    return normalizer(match)


def abbreviate_license_name(name: Optional[str]) -> Optional[str]:
    """Map a descriptive license name to an identifier.

    Names missing from the table are returned stripped; "Other", "NOASSERTION"
    and the empty string mean no usable license.
    """
    if name is None:
        return None
    name = name.strip()
    if name in LICENSE_NAME_ABBREVIATIONS:
        return LICENSE_NAME_ABBREVIATIONS[name]
    return name


# ---------------------------------------------------------------------------
# Cascade
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Request:
    doc: HeaderBlock
    directory: Optional[str]
    package_name: Optional[str]
    config: ExtractionConfig
    http_client: Optional[SafeHttpClient]

    def license_header(self) -> Optional[str]:
        for name in _LICENSE_HEADERS:
            value = self.doc.get_header(name)
            if value:
                return value
        return None


def _stage_gnu(req: _Request) -> Optional[str]:
    return normalize_match(detect_gnu_statement(req.doc.text))


def _stage_bsd(req: _Request) -> Optional[str]:
    return normalize_match(detect_bsd_statement(req.doc.text))


def _stage_mit(req: _Request) -> Optional[str]:
    return normalize_match(detect_mit_statement(req.doc.text))


def _stage_isc(req: _Request) -> Optional[str]:
    return normalize_match(detect_isc_statement(req.doc.text))


def _stage_cc(req: _Request) -> Optional[str]:
    return normalize_match(detect_cc_statement(req.doc.text))


def _stage_gnu_keyword(req: _Request) -> Optional[str]:
    value = req.license_header()
    return normalize_match(detect_gnu_keyword(value)) if value else None


def _stage_detector(req: _Request) -> Optional[str]:
    if not req.directory:
        return None
    return abbreviate_license_name(run_license_detector(req.directory, config=req.config))


def _stage_forge(req: _Request) -> Optional[str]:
    if not req.package_name:
        return None
    name = lookup_remote_license(req.package_name, config=req.config, client=req.http_client)
    return abbreviate_license_name(name)


def _stage_non_standard(req: _Request) -> Optional[str]:
    statements = req.config.license.non_standard_statements
    return normalize_match(detect_non_standard(req.doc.text, statements))


def _stage_keyword(req: _Request) -> Optional[str]:
    value = req.license_header()
    return normalize_match(detect_keyword(value)) if value else None


def _stage_generic(req: _Request) -> Optional[str]:
    # Skipped when a GNU keyword occurs anywhere in the document.
    if GNU_KEYWORD_RE.search(req.doc.text):
        return None
    return normalize_match(detect_generic_statement(req.doc.text))


_STAGES: tuple[tuple[str, Callable[[_Request], Optional[str]]], ...] = (
    ("gnu_statement", _stage_gnu),
    ("bsd_statement", _stage_bsd),
    ("mit_statement", _stage_mit),
    ("isc_statement", _stage_isc),
    ("cc_statement", _stage_cc),
    ("gnu_keyword", _stage_gnu_keyword),
    ("license_detector", _stage_detector),
    ("forge", _stage_forge),
    ("non_standard_statement", _stage_non_standard),
    ("keyword", _stage_keyword),
    ("generic_statement", _stage_generic),
)


def classify_license(
    text: Union[str, HeaderBlock],
    directory: Optional[str] = None,
    package_name: Optional[str] = None,
    *,
    config: ExtractionConfig | None = None,
    http_client: SafeHttpClient | None = None,
) -> Optional[str]:
    """Return a canonical license identifier for a document, or None.

    Args:
        text: Document text, or an already constructed HeaderBlock.
        directory: Directory handed to the external license detector.
        package_name: Package looked up on a known forge.
        config: Extraction configuration; defaults are used when omitted.
        http_client: Client for the forge lookup; built from ``config.http``
            when omitted.

    Returns:
        Optional[str]: Identifier such as ``GPL-3+`` or ``BSD-3-clause``;
        None means no license could be determined.
    """
    doc = text if isinstance(text, HeaderBlock) else HeaderBlock(text)
    req = _Request(
        doc=doc,
        directory=str(directory) if directory else None,
        package_name=package_name,
        config=config or ExtractionConfig(),
        http_client=http_client,
    )
    for name, stage in _STAGES:
        try:
            result = stage(req)
        except Exception:  # noqa: BLE001
            log.exception("License stage %s failed", name)
            continue
        if result:
            log.debug("License stage %s matched: %s", name, result)
            return result
    return None


def license_url(identifier: Optional[str], config: ExtractionConfig | None = None) -> Optional[str]:
    """Return the canonical reference URL for ``identifier``, if known."""
    if not identifier:
        return None
    return (config or ExtractionConfig()).license.urls.get(identifier)
