import json
import urllib.error

import pytest

from provmeta.core.config import ExtractionConfig, ForgeConfig
from provmeta.core.forge import (
    RepoSpec,
    github_api_get,
    lookup_remote_license,
    parse_forge_url,
    resolve_repository,
)
from provmeta.core.safe_http import PrivateAddressBlocked


class FakeResponse:
    def __init__(self, status, body, headers=None):
        self.status = status
        self.headers = headers or {}
        self._body = body

    def read(self, amt=None):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None


class FakeClient:
    def __init__(self, status=200, payload=None, raw=None, error=None):
        self.status = status
        self.body = raw if raw is not None else json.dumps(payload or {}).encode("utf-8")
        self.error = error
        self.requests = []

    def open(self, request, *, timeout=None):
        self.requests.append((request, timeout))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status, self.body, {"Content-Type": "application/json"})


def forge_config(**kwargs) -> ExtractionConfig:
    cfg = ExtractionConfig()
    cfg.forge = ForgeConfig(**kwargs)
    return cfg


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://github.com/owner/repo", RepoSpec("owner", "repo")),
        ("https://github.com/owner/repo.git", RepoSpec("owner", "repo")),
        ("https://www.github.com/owner/repo/tree/main", RepoSpec("owner", "repo")),
        ("git@github.com:owner/repo.git", RepoSpec("owner", "repo")),
        ("gh:owner/repo", RepoSpec("owner", "repo")),
        ("https://gitlab.com/owner/repo", None),
        ("just-a-name", None),
        ("", None),
    ],
)
def test_parse_forge_url(url, expected):
    assert parse_forge_url(url) == expected


def test_resolve_repository_uses_configured_mapping():
    cfg = forge_config(repositories={"mypkg": "https://github.com/someone/mypkg"})
    assert resolve_repository("mypkg", cfg).full_name == "someone/mypkg"
    assert resolve_repository("otherpkg", cfg) is None


def test_github_api_get_sends_token(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "abc123")
    client = FakeClient(payload={"ok": True})

    status, headers, body = github_api_get("repos/o/r", client=client, timeout=5)

    assert status == 200
    assert headers["Content-Type"] == "application/json"
    assert json.loads(body) == {"ok": True}
    request, timeout = client.requests[0]
    assert request.full_url == "https://api.github.com/repos/o/r"
    assert request.get_header("Authorization") == "Bearer abc123"
    assert timeout == 5


def test_lookup_remote_license_returns_name(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GH_TOKEN", raising=False)
    client = FakeClient(payload={"license": {"key": "mit", "name": "MIT License"}})

    name = lookup_remote_license("https://github.com/owner/repo", client=client)

    assert name == "MIT License"
    request, _timeout = client.requests[0]
    assert request.full_url == "https://api.github.com/repos/owner/repo"


def test_lookup_remote_license_disabled():
    client = FakeClient(payload={"license": {"name": "MIT License"}})
    cfg = forge_config(enabled=False)
    assert lookup_remote_license("gh:owner/repo", config=cfg, client=client) is None
    assert client.requests == []


def test_lookup_remote_license_unknown_forge():
    client = FakeClient(payload={"license": {"name": "MIT License"}})
    assert lookup_remote_license("somepkg", client=client) is None
    assert client.requests == []


def test_lookup_remote_license_throttled_is_warning(caplog):
    client = FakeClient(status=403)
    with caplog.at_level("WARNING", logger="provmeta"):
        assert lookup_remote_license("gh:owner/repo", client=client) is None
    assert "throttled" in caplog.text


@pytest.mark.parametrize(
    "client",
    [
        FakeClient(status=404),
        FakeClient(raw=b"not json"),
        FakeClient(payload={"license": None}),
        FakeClient(error=urllib.error.URLError("offline")),
        FakeClient(error=PrivateAddressBlocked("blocked")),
    ],
)
def test_lookup_remote_license_failures_yield_none(client):
    assert lookup_remote_license("gh:owner/repo", client=client) is None
