# patterns.py
# SPDX-License-Identifier: MIT
"""Ordered regular expressions and lookup tables for license detection.

Permission statements live in comment blocks, so a single space in a phrase
stands for any run of whitespace and comment leaders (``;``, ``#``, ``//``,
``*``, ``--`` ...). Everything here is compiled at import time and never
mutated afterwards; detectors in :mod:`provmeta.core.licenses` consume these
objects and the normalizers there turn their capture groups into identifiers.
"""

from __future__ import annotations

import re
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

__all__ = [
    "SEP",
    "GNU_STATEMENT_RE",
    "GNU_KEYWORD_RE",
    "BSD_STATEMENT_RE",
    "BSD_ADVERTISING_RE",
    "BSD_ENDORSEMENT_RE",
    "MIT_STATEMENT_RE",
    "ISC_STATEMENT_RE",
    "CC_STATEMENT_RE",
    "GNU_VARIANT_NAMES",
    "CC_VARIANT_CODES",
    "KEYWORD_PATTERNS",
    "GENERIC_STATEMENTS",
    "NON_STANDARD_STATEMENTS",
    "LICENSE_NAME_ABBREVIATIONS",
    "phrase_regexp",
]

# Whitespace and comment leaders between the words of a statement.
SEP = r"(?:\s|[;#*/%!]|--)+"
_P = r"[.,:;]?"


def _phrase(text: str) -> str:
    """Replace each literal space in ``text`` with :data:`SEP`."""
    return text.replace(" ", SEP)


@lru_cache(maxsize=256)
def phrase_regexp(literal: str) -> re.Pattern[str]:
    """Compile a literal statement so that line breaks and comment leaders
    between its words still match."""
    words = [re.escape(word) for word in literal.split()]
    return re.compile(SEP.join(words), re.IGNORECASE)


# ---------------------------------------------------------------------------
# GNU family
# ---------------------------------------------------------------------------

_GNU_FULL_NAME = _phrase(
    r"GNU (?:(?P<variant>Lesser|Library|Affero|Free) )?(?:General Public|Documentation) Licen[sc]e"
)
_GNU_PUBLISHED = _phrase(
    _P + r"(?: as published by the (?:Free Software Foundation|FSF))?"
)
# Unprefixed version numbers have at most two leading digits.
_BARE_VERSION = r"(?=\d{1,2}(?:\.\d+)*(?!\d))"
_GNU_VERSION = (
    r"(?:" + _P + r"(?:" + SEP + r"either)?"
    + r"(?:" + _phrase(r" (?:GPL )?version ") + r"|" + SEP + r"v|[- ]?v|[- ]?" + _BARE_VERSION + r")"
    + r"(?P<version>\d+(?:\.\d+)*)"
    + _phrase(r"(?: of the Licen[sc]e)?") + r")?"
)
_GNU_LATER = (
    r"(?P<later>\+|-or-later|" + _P + _phrase(r" or (?:\(at your option\) )?(?:any )?later") + r")?"
)

#: Full permission-statement prose. ``abbrev`` only fires after
#: "licensed under"/"under the terms of", never on a bare mention.
GNU_STATEMENT_RE = re.compile(
    r"(?:" + _GNU_FULL_NAME
    + r"|" + _phrase(r"(?:licensed under|under the terms of) (?:the )?")
    + r"(?P<abbrev>[LAF]?GPL)(?![a-uw-z]))"
    + _GNU_PUBLISHED + _GNU_VERSION + _GNU_LATER,
    re.IGNORECASE,
)

#: Short keyword form, e.g. ``GPLv3+``, ``lgpl2``, ``GNU GPL version 2 or later``.
GNU_KEYWORD_RE = re.compile(
    r"(?:" + _GNU_FULL_NAME
    + r"|(?<![a-z])(?P<abbrev>[LAF]?GPL)(?![a-uw-z]))"
    + _GNU_VERSION + _GNU_LATER,
    re.IGNORECASE,
)

GNU_VARIANT_NAMES: Mapping[Optional[str], str] = MappingProxyType({
    "lesser": "LGPL",
    "library": "LGBL",
    "affero": "AGPL",
    "free": "FDL",
    None: "GPL",
})


# ---------------------------------------------------------------------------
# BSD / MIT / ISC / Creative Commons
# ---------------------------------------------------------------------------

BSD_STATEMENT_RE = re.compile(
    _phrase(
        r"Redistribution and use in source and binary forms" + _P
        + r" with or without modification" + _P + r" are permitted"
    ),
    re.IGNORECASE,
)
BSD_ADVERTISING_RE = re.compile(
    _phrase(r"All advertising materials mentioning features or use of this software"),
    re.IGNORECASE,
)
BSD_ENDORSEMENT_RE = re.compile(
    r"(?:" + _phrase(r"Neither the name") + r"|"
    + _phrase(r"may not be used to endorse or promote") + r")",
    re.IGNORECASE,
)

MIT_STATEMENT_RE = re.compile(
    _phrase(
        r"Permission is hereby granted" + _P + r" free of charge" + _P
        + r" to any person obtaining a copy of this software"
        + r"(?: and associated documentation files)?"
    )
    + r"(?P<expat>" + SEP + r"?\((?:the" + SEP + r")?[\"'“”`]{0,2}Software[\"'“”`]{0,2}\))?",
    re.IGNORECASE,
)

ISC_STATEMENT_RE = re.compile(
    _phrase(
        r"Permission to use" + _P + r" copy" + _P + r" modify" + _P
        + r" (?:and(?P<andor>/or)? )?distribute this software for any purpose"
    ),
    re.IGNORECASE,
)

_CC_SEP = r"[-\s]+"
CC_STATEMENT_RE = re.compile(
    _phrase(r"Creative Commons ")
    + r"(?P<variant>Attribution"
    + r"(?:" + _CC_SEP + r"Non-?Commercial)?"
    + r"(?:" + _CC_SEP + r"(?:Share-?Alike|No-?Deriv(?:ative)?s))?)"
    + SEP + r"(?:(?:Licen[sc]e|Public" + SEP + r"Licen[sc]e)" + SEP + r")?"
    + r"(?:v(?:ersion)?\.?" + SEP + r"?)?"
    + r"(?P<version>\d+\.\d+)",
    re.IGNORECASE,
)

#: Variant phrase with separators removed, lower-cased → code.
CC_VARIANT_CODES: Mapping[str, str] = MappingProxyType({
    "attribution": "BY",
    "attributionsharealike": "BY-SA",
    "attributionnoncommercial": "BY-NC",
    "attributionnoderivatives": "BY-ND",
    "attributionnoderivs": "BY-ND",
    "attributionnoncommercialsharealike": "BY-NC-SA",
    "attributionnoncommercialnoderivatives": "BY-NC-ND",
    "attributionnoncommercialnoderivs": "BY-NC-ND",
})


# ---------------------------------------------------------------------------
# License header keywords (non-GNU)
# ---------------------------------------------------------------------------

_KW_VERSION = r"(?:[-\s,]*(?:v|version)?[-\s.]*(?P<version>\d+(?:\.\d+)*))?"

#: Ordered (pattern, identifier, takes_version) entries.
KEYWORD_PATTERNS: tuple[tuple[re.Pattern[str], str, bool], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), identifier, versioned)
    for pattern, identifier, versioned in (
        (r"\bapache(?:[-\s]+licen[sc]e)?" + _KW_VERSION, "Apache", True),
        (r"\b(?:bsd[-\s]*2(?:[-\s]*clause)?|(?:simplified|freebsd)[-\s]+bsd|2[-\s]*clause[-\s]+bsd)\b",
         "BSD-2-clause", False),
        (r"\b(?:bsd[-\s]*3(?:[-\s]*clause)?|(?:new|revised|modified)[-\s]+bsd|3[-\s]*clause[-\s]+bsd)\b",
         "BSD-3-clause", False),
        (r"\b(?:bsd[-\s]*4(?:[-\s]*clause)?|original[-\s]+bsd|4[-\s]*clause[-\s]+bsd)\b",
         "BSD-4-clause", False),
        (r"\bbsd\b", "BSD", False),
        (r"\bmit\b", "MIT", False),
        (r"\b(?:mpl|mozilla[-\s]+public[-\s]+licen[sc]e)" + _KW_VERSION, "MPL", True),
        (r"\bisc\b", "ISC", False),
        (r"\bas[-\s]+is\b", "as-is", False),
        (r"\bpublic[-\s]+domain\b", "public-domain", False),
        (r"\bwtfpl\b", "WTFPL", False),
    )
)


# ---------------------------------------------------------------------------
# Catch-all statement fragments and non-standard literals
# ---------------------------------------------------------------------------

#: Ordered (pattern, identifier) entries; only consulted when no GNU keyword
#: occurs anywhere in the document.
GENERIC_STATEMENTS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), identifier)
    for pattern, identifier in (
        (_phrase(r"do what the fuck you want to"), "WTFPL"),
        (r"\b" + _phrase(r"in(?:to)? the public domain"), "public-domain"),
        (r"\b(?:provided|distributed|released|offered)" + SEP + r"[\"'“`]{0,2}as[-\s]+is\b", "as-is"),
        (r"[\"'“`]as[-\s]+is[\"'”`]", "as-is"),
    )
)

#: Project-specific statements seen in the wild, matched literally in order.
NON_STANDARD_STATEMENTS: tuple[tuple[str, str], ...] = (
    ("This file is part of GNU Emacs.", "GPL-3+"),
    ("Licensed under the same terms as Emacs", "GPL-3+"),
    ("Licensed under the same terms as Perl itself", "Artistic-1.0-Perl"),
    ("This is free and unencumbered software released into the public domain", "Unlicense"),
    ("Use of this source code is governed by a BSD-style license", "BSD-3-clause"),
    ("Use of this source code is governed by an MIT-style license", "MIT"),
    ("Released under the MIT license", "MIT"),
    ("Licensed under the Apache License, Version 2.0", "Apache-2.0"),
    ("subject to the terms of the Mozilla Public License, v. 2.0", "MPL-2.0"),
)


# ---------------------------------------------------------------------------
# Descriptive names from the license detector and forge APIs
# ---------------------------------------------------------------------------

#: Descriptive name → identifier; ``None`` means "no usable license".
LICENSE_NAME_ABBREVIATIONS: Mapping[str, Optional[str]] = MappingProxyType({
    "Apache License 2.0": "Apache-2.0",
    "Boost Software License 1.0": "BSL-1.0",
    "BSD 2-Clause \"Simplified\" License": "BSD-2-clause",
    "BSD 3-Clause \"New\" or \"Revised\" License": "BSD-3-clause",
    "BSD 4-Clause \"Original\" or \"Old\" License": "BSD-4-clause",
    "Creative Commons Attribution 4.0 International": "CC-BY-4.0",
    "Creative Commons Attribution Share Alike 4.0 International": "CC-BY-SA-4.0",
    "Creative Commons Zero v1.0 Universal": "CC0-1.0",
    "Do What The F*ck You Want To Public License": "WTFPL",
    "Eclipse Public License 1.0": "EPL-1.0",
    "Eclipse Public License 2.0": "EPL-2.0",
    "European Union Public License 1.1": "EUPL-1.1",
    "European Union Public License 1.2": "EUPL-1.2",
    "GNU Affero General Public License v3.0": "AGPL-3",
    "GNU Free Documentation License v1.3": "FDL-1.3",
    "GNU General Public License v2.0": "GPL-2",
    "GNU General Public License v3.0": "GPL-3",
    "GNU Lesser General Public License v2.1": "LGPL-2.1",
    "GNU Lesser General Public License v3.0": "LGPL-3",
    "ISC License": "ISC",
    "MIT License": "MIT",
    "Mozilla Public License 2.0": "MPL-2.0",
    "SIL Open Font License 1.1": "OFL-1.1",
    "The Unlicense": "Unlicense",
    "zlib License": "Zlib",
    "NOASSERTION": None,
    "Other": None,
    "": None,
})
