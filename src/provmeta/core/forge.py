# forge.py
# SPDX-License-Identifier: MIT
"""Look up a package's declared license on a hosting forge.

Only GitHub is supported. A package is "hosted on a known forge" when the
configuration maps its name to a GitHub repository URL, or when the name is
such a URL itself.
"""

from __future__ import annotations

import json
import os
import re
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .config import ExtractionConfig
from .log import get_logger
from .safe_http import PrivateAddressBlocked, RedirectBlocked, SafeHttpClient

__all__ = [
    "RepoSpec",
    "parse_forge_url",
    "resolve_repository",
    "github_api_get",
    "lookup_remote_license",
]

log = get_logger(__name__)

_USER_AGENT = "provmeta/0.1"

_GH_REPO = re.compile(r"^https?://(?:www\.)?github\.com/(?P<owner>[^/]+)/(?P<repo>[^/#?]+?)(?:\.git)?/?(?:$|[?#/])")
_SSH = re.compile(r"^(?:git@|ssh://git@)github\.com[:/](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?$")
_SHORT = re.compile(r"^(?:github:|gh:)(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+)$")


@dataclass(frozen=True)
class RepoSpec:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_forge_url(url: str) -> Optional[RepoSpec]:
    """Parse a GitHub URL into a RepoSpec.

    Supported forms:
      - https://github.com/owner/repo[.git][/...]
      - git@github.com:owner/repo(.git)
      - github:owner/repo or gh:owner/repo
    Returns None for anything else.
    """
    u = (url or "").strip()
    for pattern in (_GH_REPO, _SSH, _SHORT):
        m = pattern.match(u)
        if m:
            return RepoSpec(m.group("owner"), m.group("repo"))
    return None


def resolve_repository(package_name: str, config: ExtractionConfig | None = None) -> Optional[RepoSpec]:
    cfg = config or ExtractionConfig()
    url = cfg.forge.repositories.get(package_name, package_name)
    return parse_forge_url(url)


def _auth_token() -> Optional[str]:
    return os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")


def github_api_get(
    path: str,
    *,
    client: SafeHttpClient,
    api_base: str = "https://api.github.com",
    timeout: float = 30.0,
) -> Tuple[int, Dict[str, Any], bytes]:
    """GET ``path`` from the GitHub API and return ``(status, headers, body)``.

    HTTP error statuses are returned, not raised.
    """
    if not path.startswith("/"):
        path = "/" + path
    headers = {"User-Agent": _USER_AGENT, "Accept": "application/vnd.github+json"}
    token = _auth_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    req = urllib.request.Request(api_base.rstrip("/") + path, headers=headers)
    with client.open(req, timeout=timeout) as resp:
        return resp.status, dict(resp.headers.items()), resp.read()


def lookup_remote_license(
    package_name: str,
    *,
    config: ExtractionConfig | None = None,
    client: SafeHttpClient | None = None,
) -> Optional[str]:
    """Return the descriptive license name a forge reports for a package.

    Returns None when the lookup is disabled, the package is not on a known
    forge, or the request or its payload is unusable.
    """
    cfg = config or ExtractionConfig()
    if not cfg.forge.enabled or not package_name:
        return None
    spec = resolve_repository(package_name, cfg)
    if spec is None:
        log.debug("Package %s is not hosted on a known forge", package_name)
        return None
    http = client or cfg.http.build_client()
    try:
        status, _headers, body = github_api_get(
            f"/repos/{spec.owner}/{spec.repo}",
            client=http,
            api_base=cfg.forge.api_base,
            timeout=cfg.forge.timeout,
        )
    except (urllib.error.URLError, OSError, PrivateAddressBlocked, RedirectBlocked) as exc:
        log.info("Forge lookup failed for %s: %s", spec.full_name, exc)
        return None
    if status != 200:
        if status in (403, 429):
            log.warning("Forge lookup throttled for %s: HTTP %s", spec.full_name, status)
        else:
            log.info("No forge metadata for %s (HTTP %s)", spec.full_name, status)
        return None
    try:
        meta = json.loads(body.decode("utf-8", "replace"))
    except ValueError:
        log.info("Forge returned malformed JSON for %s", spec.full_name)
        return None
    lic = meta.get("license") if isinstance(meta, dict) else None
    name = lic.get("name") if isinstance(lic, dict) else None
    return name if isinstance(name, str) else None
