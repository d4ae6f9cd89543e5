# metadata.py
# SPDX-License-Identifier: MIT
"""Per-document metadata extraction.

:func:`extract_metadata` runs every extractor independently against the same
header block. A failure inside one extractor is logged and leaves that field
empty; it never aborts the others.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any, Optional, TypeVar, Union

from .config import ExtractionConfig
from .contacts import Contact, parse_contacts
from .dates import resolve_created_date, resolve_updated_date
from .headers import HeaderBlock
from .licenses import classify_license, license_url
from .log import get_logger
from .safe_http import SafeHttpClient

log = get_logger(__name__)

__all__ = [
    "DocumentMetadata",
    "extract_metadata",
    "extract_authors",
    "extract_maintainers",
    "extract_keywords",
]

T = TypeVar("T")

AUTHOR_HEADERS = ("Author", "Authors")
MAINTAINER_HEADERS = ("Maintainer", "Maintainers")
_KEYWORD_SPLIT_RE = re.compile(r"[,\s]+")

Text = Union[str, HeaderBlock]


@dataclass(slots=True)
class DocumentMetadata:
    """Everything extracted from one document."""
    license: Optional[str] = None
    license_url: Optional[str] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    authors: list[Contact] = field(default_factory=list)
    maintainers: list[Contact] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["authors"] = [c._asdict() for c in self.authors]
        data["maintainers"] = [c._asdict() for c in self.maintainers]
        return data


def _doc(text: Text) -> HeaderBlock:
    return text if isinstance(text, HeaderBlock) else HeaderBlock(text)


def _header_lines(doc: HeaderBlock, names: tuple[str, ...]) -> list[str]:
    for name in names:
        lines = doc.get_header_lines(name)
        if lines:
            return lines
    return []


def extract_authors(
    text: Text, *, config: ExtractionConfig | None = None, sanitize: bool = True
) -> list[Contact]:
    cfg = config or ExtractionConfig()
    remap = cfg.remap.names if sanitize else None
    return parse_contacts(_header_lines(_doc(text), AUTHOR_HEADERS), remap)


def extract_maintainers(
    text: Text,
    *,
    config: ExtractionConfig | None = None,
    sanitize: bool = True,
    fallback: bool = True,
) -> list[Contact]:
    """Maintainers from ``Maintainer`` headers; authors stand in when absent
    and ``fallback`` is set."""
    doc = _doc(text)
    cfg = config or ExtractionConfig()
    remap = cfg.remap.names if sanitize else None
    maintainers = parse_contacts(_header_lines(doc, MAINTAINER_HEADERS), remap)
    if not maintainers and fallback:
        return extract_authors(doc, config=cfg, sanitize=sanitize)
    return maintainers


def extract_keywords(
    text: Text, *, config: ExtractionConfig | None = None, sanitize: bool = True
) -> list[str]:
    lines = _header_lines(_doc(text), ("Keywords",))
    words = [w.lower() for line in lines for w in _KEYWORD_SPLIT_RE.split(line) if w]
    if sanitize:
        words = (config or ExtractionConfig()).remap.keywords.apply_all(words)
    return list(dict.fromkeys(words))


def _safely(label: str, func: Callable[[], T], default: T) -> T:
    try:
        return func()
    except Exception:  # noqa: BLE001
        log.exception("Metadata extractor %s failed", label)
        return default


def extract_metadata(
    text: Text,
    directory: Optional[str] = None,
    package_name: Optional[str] = None,
    *,
    config: ExtractionConfig | None = None,
    http_client: SafeHttpClient | None = None,
    sanitize: bool = True,
) -> DocumentMetadata:
    """Extract license, dates, contacts and keywords from one document.

    Args:
        text: Document text or a prepared HeaderBlock.
        directory: Passed to the external license detector.
        package_name: Passed to the forge lookup.
        config: Shared read-only configuration.
        http_client: Optional client for the forge lookup.
        sanitize: Apply the keyword and name remap tables.

    Returns:
        DocumentMetadata: Missing values are None or empty lists.
    """
    doc = _doc(text)
    cfg = config or ExtractionConfig()
    license_id = _safely(
        "license",
        lambda: classify_license(doc, directory, package_name, config=cfg, http_client=http_client),
        None,
    )
    return DocumentMetadata(
        license=license_id,
        license_url=license_url(license_id, cfg),
        created=_safely("created", lambda: resolve_created_date(doc), None),
        updated=_safely("updated", lambda: resolve_updated_date(doc), None),
        authors=_safely("authors", lambda: extract_authors(doc, config=cfg, sanitize=sanitize), []),
        maintainers=_safely(
            "maintainers", lambda: extract_maintainers(doc, config=cfg, sanitize=sanitize), []
        ),
        keywords=_safely("keywords", lambda: extract_keywords(doc, config=cfg, sanitize=sanitize), []),
    )
