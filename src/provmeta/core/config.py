# config.py
# SPDX-License-Identifier: MIT
"""Configuration models and loaders for provmeta.

All tables (keyword/name remaps, non-standard permission statements, the
license→URL table, forge repository mappings) are built once, usually from a
JSON or TOML file, and treated as read-only afterwards. Malformed entries are
rejected while loading so that a bad table never reaches an extraction call.
"""
from __future__ import annotations

import json
try:  # pragma: no cover - depends on interpreter version
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]
from collections.abc import Mapping as ABCMapping
from collections.abc import Sequence as ABCSequence
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .log import PACKAGE_LOGGER_NAME, configure_logging
from .patterns import NON_STANDARD_STATEMENTS
from .safe_http import SafeHttpClient

__all__ = [
    "RemapTable",
    "LicenseConfig",
    "ForgeConfig",
    "RemapConfig",
    "HttpConfig",
    "LoggingConfig",
    "ExtractionConfig",
    "DEFAULT_LICENSE_URLS",
    "load_config_from_path",
]


# ---------------------------------------------------------------------------
# Remap tables
# ---------------------------------------------------------------------------

class RemapTable:
    """Read-only mapping of raw tokens to a replacement or to "drop".

    A value of ``None`` means the token is dropped. In JSON/TOML files a drop
    is spelled ``null``, ``false`` or ``""``.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Any] | Iterable[Tuple[str, Any]] | None = None):
        table: Dict[str, Optional[str]] = {}
        items = entries.items() if isinstance(entries, ABCMapping) else (entries or ())
        for item in items:
            try:
                key, value = item
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Remap entry must be a (key, value) pair; got {item!r}") from exc
            if not isinstance(key, str) or not key:
                raise ValueError(f"Remap key must be a non-empty string; got {key!r}")
            if value is None or value is False or value == "":
                table[key] = None
            elif isinstance(value, str):
                table[key] = value
            else:
                raise ValueError(
                    f"Remap value for {key!r} must be a string or a drop marker "
                    f"(null/false/\"\"); got {type(value).__name__}"
                )
        self._entries: Mapping[str, Optional[str]] = MappingProxyType(table)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RemapTable):
            return dict(self._entries) == dict(other._entries)
        return NotImplemented

    def __repr__(self) -> str:
        return f"RemapTable({dict(self._entries)!r})"

    def lookup(self, key: str) -> Tuple[bool, Optional[str]]:
        """Return ``(found, replacement)``; replacement is None for drops."""
        if key in self._entries:
            return True, self._entries[key]
        return False, key

    def apply(self, key: str) -> Optional[str]:
        """Return the remapped token, the token itself, or None when dropped."""
        return self._entries.get(key, key)

    def apply_all(self, keys: Iterable[str]) -> list[str]:
        """Remap a sequence, removing dropped tokens and preserving order."""
        out: list[str] = []
        for key in keys:
            value = self.apply(key)
            if value is not None:
                out.append(value)
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {k: (False if v is None else v) for k, v in self._entries.items()}


# ---------------------------------------------------------------------------
# Section configs
# ---------------------------------------------------------------------------

DEFAULT_LICENSE_URLS: Mapping[str, str] = MappingProxyType({
    "GPL-2": "https://www.gnu.org/licenses/old-licenses/gpl-2.0.html",
    "GPL-2+": "https://www.gnu.org/licenses/old-licenses/gpl-2.0.html",
    "GPL-3": "https://www.gnu.org/licenses/gpl-3.0.html",
    "GPL-3+": "https://www.gnu.org/licenses/gpl-3.0.html",
    "LGPL-2": "https://www.gnu.org/licenses/old-licenses/lgpl-2.0.html",
    "LGPL-2+": "https://www.gnu.org/licenses/old-licenses/lgpl-2.0.html",
    "LGPL-2.1": "https://www.gnu.org/licenses/old-licenses/lgpl-2.1.html",
    "LGPL-2.1+": "https://www.gnu.org/licenses/old-licenses/lgpl-2.1.html",
    "LGPL-3": "https://www.gnu.org/licenses/lgpl-3.0.html",
    "LGPL-3+": "https://www.gnu.org/licenses/lgpl-3.0.html",
    "AGPL-3": "https://www.gnu.org/licenses/agpl-3.0.html",
    "AGPL-3+": "https://www.gnu.org/licenses/agpl-3.0.html",
    "FDL-1.2": "https://www.gnu.org/licenses/old-licenses/fdl-1.2.html",
    "FDL-1.2+": "https://www.gnu.org/licenses/old-licenses/fdl-1.2.html",
    "FDL-1.3": "https://www.gnu.org/licenses/fdl-1.3.html",
    "FDL-1.3+": "https://www.gnu.org/licenses/fdl-1.3.html",
    "Apache-2.0": "https://www.apache.org/licenses/LICENSE-2.0",
    "BSD-2-clause": "https://opensource.org/licenses/BSD-2-Clause",
    "BSD-3-clause": "https://opensource.org/licenses/BSD-3-Clause",
    "BSD-4-clause": "https://spdx.org/licenses/BSD-4-Clause.html",
    "CC0-1.0": "https://creativecommons.org/publicdomain/zero/1.0/",
    "CC-BY-3.0": "https://creativecommons.org/licenses/by/3.0/",
    "CC-BY-4.0": "https://creativecommons.org/licenses/by/4.0/",
    "CC-BY-SA-3.0": "https://creativecommons.org/licenses/by-sa/3.0/",
    "CC-BY-SA-4.0": "https://creativecommons.org/licenses/by-sa/4.0/",
    "CC-BY-NC-4.0": "https://creativecommons.org/licenses/by-nc/4.0/",
    "CC-BY-ND-4.0": "https://creativecommons.org/licenses/by-nd/4.0/",
    "CC-BY-NC-SA-4.0": "https://creativecommons.org/licenses/by-nc-sa/4.0/",
    "CC-BY-NC-ND-4.0": "https://creativecommons.org/licenses/by-nc-nd/4.0/",
    "EPL-1.0": "https://www.eclipse.org/legal/epl-v10.html",
    "EPL-2.0": "https://www.eclipse.org/legal/epl-2.0/",
    "EUPL-1.1": "https://joinup.ec.europa.eu/collection/eupl/eupl-text-11-12",
    "EUPL-1.2": "https://joinup.ec.europa.eu/collection/eupl/eupl-text-eupl-12",
    "ISC": "https://opensource.org/licenses/ISC",
    "ISC (and)": "https://opensource.org/licenses/ISC",
    "ISC (and/or)": "https://opensource.org/licenses/ISC",
    "MIT": "https://opensource.org/licenses/MIT",
    "MIT (expat)": "https://spdx.org/licenses/MIT.html",
    "MIT (x11)": "https://spdx.org/licenses/X11.html",
    "MPL-2.0": "https://www.mozilla.org/en-US/MPL/2.0/",
    "Unlicense": "https://unlicense.org/",
    "WTFPL": "http://www.wtfpl.net/",
})


def _freeze_mapping(value: Mapping[str, str] | None, *, label: str) -> Mapping[str, str]:
    out: Dict[str, str] = {}
    for key, val in (value or {}).items():
        if not isinstance(key, str) or not isinstance(val, str):
            raise ValueError(f"{label} entries must map strings to strings; got {key!r}: {val!r}")
        out[key] = val
    return MappingProxyType(out)


@dataclass(frozen=True, slots=True)
class LicenseConfig:
    """Settings for the license classifier and its fallbacks.

    Attributes:
        use_detector (bool): Whether the external license detector may be
            invoked for a directory (stage 7).
        detector_command (tuple[str, ...]): Command prefix; the directory is
            appended as the last argument.
        non_standard_statements (tuple[tuple[str, str], ...]): Ordered
            literal statement → identifier pairs (stage 9).
        urls (Mapping[str, str]): Canonical identifier → reference URL.
    """
    use_detector: bool = True
    detector_command: Tuple[str, ...] = ("licensee", "detect")
    non_standard_statements: Tuple[Tuple[str, str], ...] = NON_STANDARD_STATEMENTS
    urls: Mapping[str, str] = field(default_factory=lambda: DEFAULT_LICENSE_URLS)

    def __post_init__(self) -> None:
        if not self.detector_command:
            raise ValueError("license.detector_command must not be empty")
        for entry in self.non_standard_statements:
            if len(entry) != 2 or not all(isinstance(part, str) and part for part in entry):
                raise ValueError(f"license.non_standard_statements entry must be [statement, identifier]; got {entry!r}")
        object.__setattr__(self, "urls", _freeze_mapping(self.urls, label="license.urls"))


@dataclass(frozen=True, slots=True)
class ForgeConfig:
    """Remote forge lookup settings.

    ``repositories`` maps package names to repository URLs on a supported
    forge; a package name that is itself such a URL needs no entry.
    """
    enabled: bool = True
    api_base: str = "https://api.github.com"
    timeout: float = 30.0
    repositories: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "repositories", _freeze_mapping(self.repositories, label="forge.repositories")
        )


@dataclass(frozen=True, slots=True)
class RemapConfig:
    """Remap tables consulted only when sanitizing."""
    keywords: RemapTable = field(default_factory=RemapTable)
    names: RemapTable = field(default_factory=RemapTable)


@dataclass(slots=True)
class HttpConfig:
    """HTTP client settings for the forge lookup.

    ``client`` may hold a pre-built SafeHttpClient; otherwise ``build_client``
    returns a fresh client and leaves the config untouched.
    """
    timeout: float = 30.0
    max_redirects: int = 5
    allowed_redirect_suffixes: Tuple[str, ...] = ("github.com",)
    client: Optional[SafeHttpClient] = None

    def build_client(self) -> SafeHttpClient:
        if self.client is not None:
            return self.client
        return SafeHttpClient(
            timeout=self.timeout,
            max_redirects=self.max_redirects,
            allowed_redirect_suffixes=self.allowed_redirect_suffixes,
        )


@dataclass(slots=True)
class LoggingConfig:
    """Controls the package logger."""
    level: int | str = "INFO"
    propagate: bool = False
    fmt: Optional[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logger_name: str = PACKAGE_LOGGER_NAME

    def apply(self) -> None:
        configure_logging(
            level=self.level,
            propagate=self.propagate,
            fmt=self.fmt,
            logger_name=self.logger_name or PACKAGE_LOGGER_NAME,
        )


# ---------------------------------------------------------------------------
# Master config
# ---------------------------------------------------------------------------

T = TypeVar("T")


@dataclass(slots=True)
class ExtractionConfig:
    """Top-level configuration shared by every extraction call."""
    license: LicenseConfig = field(default_factory=LicenseConfig)
    forge: ForgeConfig = field(default_factory=ForgeConfig)
    remap: RemapConfig = field(default_factory=RemapConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return _dataclass_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExtractionConfig":
        if not isinstance(data, ABCMapping):
            raise TypeError(f"Config must be a mapping; got {type(data).__name__}.")
        return _dataclass_from_dict(cls, data)

    def to_json(self, path: str | Path) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")

    @classmethod
    def from_json(cls, path: str | Path) -> "ExtractionConfig":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(data)

    @classmethod
    def from_toml(cls, path: str | Path) -> "ExtractionConfig":
        data = tomllib.loads(Path(path).read_bytes().decode("utf-8"))
        return cls.from_dict(data)


def load_config_from_path(path: str | Path) -> ExtractionConfig:
    """Load an ExtractionConfig from a ``.toml`` or ``.json`` file.

    Raises:
        ValueError: If the extension is unsupported or a table is malformed.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".toml":
        return ExtractionConfig.from_toml(p)
    if suffix == ".json":
        return ExtractionConfig.from_json(p)
    raise ValueError(f"Unsupported config extension {p.suffix!r}; expected .toml or .json.")


_SKIP_FIELDS: Dict[Type[Any], set[str]] = {
    HttpConfig: {"client"},
}


def _dataclass_to_dict(obj: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    skip = _SKIP_FIELDS.get(type(obj), set())
    for f in fields(obj):
        if f.name in skip:
            continue
        value = getattr(obj, f.name)
        if value is None:
            continue
        result[f.name] = _serialize_value(value)
    return result


def _serialize_value(value: Any) -> Any:
    if isinstance(value, RemapTable):
        return value.to_dict()
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, ABCMapping):
        return {str(k): _serialize_value(v) for k, v in value.items() if v is not None}
    if is_dataclass(value):
        return _dataclass_to_dict(value)
    return None


def _dataclass_from_dict(cls: Type[T], data: Mapping[str, Any] | None) -> T:
    """Instantiate ``cls`` from a mapping, rejecting unknown keys."""
    if data is None:
        return cls()  # type: ignore[call-arg]
    if not isinstance(data, ABCMapping):
        raise TypeError(f"Expected a table for {cls.__name__}; got {type(data).__name__}.")
    type_hints = get_type_hints(cls)
    known = {f.name for f in fields(cls)} - _SKIP_FIELDS.get(cls, set())
    unknown = sorted(k for k in data if k not in known)
    if unknown:
        raise ValueError(
            f"Unsupported options for {cls.__name__}: {', '.join(unknown)}. "
            f"Allowed keys: {', '.join(sorted(known))}"
        )
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _coerce_value(type_hints.get(f.name, f.type), data[f.name])
    return cls(**kwargs)  # type: ignore[arg-type]


def _coerce_value(expected_type: Any, value: Any) -> Any:
    base_type = _strip_optional(expected_type)
    if value is None:
        return None
    if base_type is RemapTable:
        if isinstance(value, RemapTable):
            return value
        if not isinstance(value, ABCMapping):
            raise ValueError(f"Remap table must be a mapping; got {type(value).__name__}")
        return RemapTable(value)
    if isinstance(base_type, type) and is_dataclass(base_type):
        return _dataclass_from_dict(base_type, value)
    origin = get_origin(base_type)
    if origin in (list, tuple, ABCSequence):
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise ValueError(f"Expected a list; got {value!r}")
        args = [a for a in get_args(base_type) if a is not Ellipsis]
        inner = args[0] if args else Any
        items = [_coerce_value(inner, v) for v in value]
        return tuple(items) if origin is tuple else items
    if origin in (dict, ABCMapping):
        if not isinstance(value, ABCMapping):
            raise ValueError(f"Expected a table; got {value!r}")
        key_type, val_type = get_args(base_type) or (Any, Any)
        return {_coerce_value(key_type, k): _coerce_value(val_type, v) for k, v in value.items()}
    if base_type is Path:
        return Path(value)
    if base_type in (str, int, float, bool):
        return base_type(value)
    return value


def _strip_optional(typ: Any) -> Any:
    origin = get_origin(typ)
    if origin is Union:
        args = [arg for arg in get_args(typ) if arg is not type(None)]
        if len(args) == 1:
            return _strip_optional(args[0])
    return typ
