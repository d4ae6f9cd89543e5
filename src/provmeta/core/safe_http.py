# safe_http.py
# SPDX-License-Identifier: MIT
"""Stdlib-only HTTP client for forge metadata requests.

Connections are pinned to pre-resolved, globally routable addresses and
redirects may only move between related hosts.
"""

from __future__ import annotations

import http.client
import ipaddress
import socket
import ssl
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Union

from .log import get_logger

log = get_logger(__name__)

RequestLike = Union[str, urllib.request.Request]

__all__ = [
    "PrivateAddressBlocked",
    "RedirectBlocked",
    "SafeHttpResponse",
    "SafeHttpClient",
]


class PrivateAddressBlocked(RuntimeError):
    """Raised when every resolved address for a host is private or reserved."""


class RedirectBlocked(RuntimeError):
    """Raised when a redirect leaves the origin host family or downgrades scheme."""


class _PinnedHTTPConnection(http.client.HTTPConnection):
    def __init__(self, host: str, *, resolved_ip: str, **kwargs):
        super().__init__(host=host, **kwargs)
        self._resolved_ip = resolved_ip

    def connect(self) -> None:
        self.sock = self._create_connection(
            (self._resolved_ip, self.port), self.timeout, self.source_address
        )


class _PinnedHTTPSConnection(http.client.HTTPSConnection):
    def __init__(self, host: str, *, resolved_ip: str, **kwargs):
        super().__init__(host=host, **kwargs)
        self._resolved_ip = resolved_ip
        self._sni_host = host

    def connect(self) -> None:
        self.sock = self._create_connection(
            (self._resolved_ip, self.port), self.timeout, self.source_address
        )
        self.sock = self._context.wrap_socket(self.sock, server_hostname=self._sni_host)


@dataclass(frozen=True)
class SafeHttpResponse:
    """Response wrapper that owns (and closes) its connection."""

    _response: http.client.HTTPResponse
    _connection: http.client.HTTPConnection
    url: str

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def headers(self) -> http.client.HTTPMessage:
        return self._response.headers

    def read(self, amt: int | None = None) -> bytes:
        return self._response.read(amt)

    def close(self) -> None:
        try:
            self._response.close()
        finally:
            self._connection.close()

    def __enter__(self) -> SafeHttpResponse:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _allow_ip(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    """Only globally routable unicast addresses pass."""
    if not addr.is_global:
        return False
    return not (addr.is_multicast or addr.is_unspecified or addr.is_loopback or addr.is_link_local)


class SafeHttpClient:
    """HTTP client that blocks private IPs and enforces host-scoped redirects.

    Attributes:
        _default_timeout (float): Default request timeout in seconds.
        _max_redirects (int): Maximum redirects to follow.
        _trusted_redirect_suffixes (set[str]): Host suffixes between which
            redirects are always allowed.
    """

    _ALLOWED_SCHEMES = ("http", "https")
    _REDIRECT_CODES = {301, 302, 303, 307, 308}
    _SENSITIVE_HEADERS = {"authorization", "cookie", "proxy-authorization"}

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        max_redirects: int = 5,
        allowed_redirect_suffixes: Sequence[str] | None = None,
    ):
        self._default_timeout = timeout
        self._max_redirects = max_redirects
        self._trusted_redirect_suffixes = {
            suffix.lower().lstrip(".")
            for suffix in (allowed_redirect_suffixes or ())
            if suffix
        }

    @staticmethod
    def _normalize_host(host: str | None) -> str | None:
        if not host:
            return None
        return host.rstrip(".").lower() or None

    def _resolve_ips(self, hostname: str) -> list[str]:
        """Resolve ``hostname`` and keep only allowed addresses, in order."""
        try:
            infos = socket.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
        except socket.gaierror as exc:
            raise urllib.error.URLError(f"DNS resolution failed for {hostname}: {exc}") from exc
        ips: list[str] = []
        for _family, _stype, _proto, _canon, sockaddr in infos:
            ip = sockaddr[0]
            if ip in ips or not _allow_ip(ipaddress.ip_address(ip)):
                continue
            ips.append(ip)
        if not ips:
            raise PrivateAddressBlocked(f"All resolved addresses for {hostname} are disallowed")
        return ips

    def _hosts_related(self, origin: str | None, target: str | None) -> bool:
        origin_n = self._normalize_host(origin)
        target_n = self._normalize_host(target)
        if not origin_n or not target_n:
            return False
        if target_n == origin_n or target_n.endswith("." + origin_n):
            return True
        if origin_n.endswith("." + target_n) and "." in target_n:
            return True

        def under(host: str, suffix: str) -> bool:
            return host == suffix or host.endswith("." + suffix)

        return any(
            under(origin_n, suffix) and under(target_n, suffix)
            for suffix in self._trusted_redirect_suffixes
        )

    def _build_connection(self, scheme: str, host: str, ip: str, port: int, timeout: float):
        if scheme == "https":
            return _PinnedHTTPSConnection(
                host, resolved_ip=ip, port=port, timeout=timeout,
                context=ssl.create_default_context(),
            )
        return _PinnedHTTPConnection(host, resolved_ip=ip, port=port, timeout=timeout)

    def open(self, request: RequestLike, *, timeout: float | None = None) -> SafeHttpResponse:
        """Perform a GET-like request with address and redirect checks.

        Raises:
            urllib.error.URLError: On DNS or connection failures.
            PrivateAddressBlocked: If the host resolves only to blocked IPs.
            RedirectBlocked: If a redirect is not permitted.
        """
        req = urllib.request.Request(request) if isinstance(request, str) else request
        url = req.full_url
        return self._request(
            url=url,
            method=req.get_method(),
            headers=dict(req.header_items()),
            timeout=timeout or self._default_timeout,
            redirects_remaining=self._max_redirects,
            origin_host=urllib.parse.urlsplit(url).hostname,
        )

    def _request(
        self,
        *,
        url: str,
        method: str,
        headers: Mapping[str, str],
        timeout: float,
        redirects_remaining: int,
        origin_host: str | None,
    ) -> SafeHttpResponse:
        parsed = urllib.parse.urlsplit(url)
        scheme = (parsed.scheme or "http").lower()
        if scheme not in self._ALLOWED_SCHEMES:
            raise urllib.error.URLError(f"Unsupported URL scheme: {scheme}")
        host = parsed.hostname
        if not host:
            raise urllib.error.URLError("URL missing host")
        port = parsed.port or (443 if scheme == "https" else 80)
        path = (parsed.path or "/") + (f"?{parsed.query}" if parsed.query else "")
        default_port = (scheme, port) in (("http", 80), ("https", 443))
        send_headers = {"Host": host if default_port else f"{host}:{port}"}
        send_headers.update({k: v for k, v in headers.items() if k.lower() != "host"})

        last_error: Exception | None = None
        for ip in self._resolve_ips(host):
            conn = self._build_connection(scheme, host, ip, port, timeout)
            try:
                conn.request(method.upper(), path, headers=send_headers)
                response = conn.getresponse()
            except OSError as exc:
                last_error = exc
                conn.close()
                continue

            if response.status not in self._REDIRECT_CODES:
                log.debug("HTTP %s %s status=%s", method.upper(), url, response.status)
                return SafeHttpResponse(response, conn, url=url)

            location = response.getheader("Location")
            response.close()
            conn.close()
            if redirects_remaining <= 0:
                raise RedirectBlocked("Too many redirects")
            if not location:
                raise RedirectBlocked("Redirect response missing Location header")
            target = urllib.parse.urljoin(url, location)
            target_parts = urllib.parse.urlsplit(target)
            target_scheme = (target_parts.scheme or "http").lower()
            if target_scheme not in self._ALLOWED_SCHEMES or (scheme, target_scheme) == ("https", "http"):
                raise RedirectBlocked(f"Redirect blocked: scheme change from {scheme} to {target_scheme}")
            if not self._hosts_related(origin_host, target_parts.hostname):
                raise RedirectBlocked(
                    f"Redirect blocked: cross-host redirect from {origin_host} to {target_parts.hostname}"
                )
            if self._normalize_host(host) != self._normalize_host(target_parts.hostname):
                headers = {k: v for k, v in headers.items() if k.lower() not in self._SENSITIVE_HEADERS}
            return self._request(
                url=target,
                method="GET" if response.status in (301, 302, 303) else method,
                headers=headers,
                timeout=timeout,
                redirects_remaining=redirects_remaining - 1,
                origin_host=origin_host,
            )

        raise urllib.error.URLError(f"All resolved addresses for {host} failed") from last_error

