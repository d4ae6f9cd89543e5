# headers.py
# SPDX-License-Identifier: MIT
"""Read named header fields from a document's leading comment block.

A header looks like ``;; Author: Jane Doe <jane@example.com>``; indented
comment lines that follow it are continuation lines::

    ;; Author: Jane Doe <jane@example.com>
    ;;         John Roe <john@example.com>

The reader never tokenizes the document and keeps no scan position between
calls.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Optional, Pattern, Union

__all__ = ["HeaderBlock", "DEFAULT_COMMENT_PREFIXES"]

DEFAULT_COMMENT_PREFIXES = (";;", "#", "//", "--", "%")

_HEADER_RE = re.compile(r"^(?P<name>[A-Za-z][A-Za-z0-9_ -]*?)[ \t]*:(?:[ \t]+(?P<value>.*?))?[ \t]*$")
_CONTINUATION_INDENT_RE = re.compile(r"^(?: {2,}|[ ]*\t)")


class HeaderBlock:
    """Header-field view over one document's text.

    Args:
        text: Full document text.
        comment_prefixes: Comment leaders recognized at the start of a line;
            a leader may be repeated (``;;;``) and is followed by optional
            whitespace.
    """

    def __init__(self, text: str, comment_prefixes: Iterable[str] = DEFAULT_COMMENT_PREFIXES):
        self.text = text
        prefixes = sorted({p for p in comment_prefixes if p}, key=len, reverse=True)
        alternation = "|".join(f"(?:{re.escape(p)})+{re.escape(p[0])}*" for p in prefixes)
        self._comment_re = re.compile(rf"^[ \t]*(?:{alternation})(?P<indent>[ \t]*)(?P<body>.*)$")

    @classmethod
    def from_path(cls, path: Union[str, Path], **kwargs) -> "HeaderBlock":
        text = Path(path).read_text(encoding="utf-8", errors="replace")
        return cls(text, **kwargs)

    def _comment_lines(self) -> list[tuple[str, str] | None]:
        """Return ``(indent, body)`` for comment lines, ``None`` for code lines."""
        out: list[tuple[str, str] | None] = []
        for line in self.text.splitlines():
            m = self._comment_re.match(line)
            out.append((m.group("indent"), m.group("body").rstrip()) if m else None)
        return out

    def _find(self, name: str) -> tuple[Optional[str], list[str]] | None:
        wanted = name.strip().lower()
        lines = self._comment_lines()
        for idx, entry in enumerate(lines):
            if entry is None:
                continue
            _indent, body = entry
            m = _HEADER_RE.match(body)
            if not m or m.group("name").strip().lower() != wanted:
                continue
            continuations: list[str] = []
            for follow in lines[idx + 1:]:
                if follow is None:
                    break
                indent, cont = follow
                if not _CONTINUATION_INDENT_RE.match(indent) or not cont or _HEADER_RE.match(cont):
                    break
                continuations.append(cont.strip())
            return m.group("value"), continuations
        return None

    def get_header(self, name: str) -> Optional[str]:
        """Return the stripped value of the first ``name`` header, or None."""
        found = self._find(name)
        if found is None:
            return None
        value = (found[0] or "").strip()
        return value or None

    def get_header_lines(self, name: str) -> list[str]:
        """Return the header value followed by its continuation lines."""
        found = self._find(name)
        if found is None:
            return []
        value, continuations = found
        lines = [value.strip()] if value and value.strip() else []
        return lines + continuations

    def search_document(
        self, pattern: Union[str, Pattern[str]], from_start: bool = True, pos: int = 0
    ) -> Optional[re.Match[str]]:
        """Search the whole text for ``pattern``.

        Each call starts at the beginning (or at ``pos`` when ``from_start``
        is False); a failed search leaves nothing behind for the next one.
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return regex.search(self.text, 0 if from_start else pos)
