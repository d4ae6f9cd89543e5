# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`provmeta`.

provmeta infers provenance metadata (license identifier, creation and update
dates, author and maintainer contacts) from the loosely conventional header
block of a source document. Every extractor is stateless and returns a
best-effort canonical value or None.

Examples:
    >>> from provmeta import classify_license, parse_contact, resolve_date
    >>> classify_license(";; License: GPLv3+")
    'GPL-3+'
    >>> resolve_date("2012-03-04")
    '20120304'
    >>> parse_contact("Jane Doe <jane@example.com>")
    Contact(name='Jane Doe', email='jane@example.com')
"""

from __future__ import annotations

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("provmeta")
except Exception:  # PackageNotFoundError or runtime env oddities
    __version__ = "0.0.0+unknown"

from .core.config import ExtractionConfig, RemapTable, load_config_from_path
from .core.contacts import Contact, parse_contact, parse_contacts
from .core.dates import resolve_created_date, resolve_date, resolve_updated_date
from .core.headers import HeaderBlock
from .core.licenses import classify_license, license_url
from .core.log import configure_logging, get_logger
from .core.metadata import (
    DocumentMetadata,
    extract_authors,
    extract_keywords,
    extract_maintainers,
    extract_metadata,
)

__all__ = [
    "__version__",
    "ExtractionConfig",
    "RemapTable",
    "load_config_from_path",
    "HeaderBlock",
    "classify_license",
    "license_url",
    "resolve_date",
    "resolve_created_date",
    "resolve_updated_date",
    "Contact",
    "parse_contact",
    "parse_contacts",
    "DocumentMetadata",
    "extract_metadata",
    "extract_authors",
    "extract_maintainers",
    "extract_keywords",
    "configure_logging",
    "get_logger",
]
