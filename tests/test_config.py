import dataclasses
import json
import logging

import pytest

from provmeta.core.config import (
    DEFAULT_LICENSE_URLS,
    ExtractionConfig,
    ForgeConfig,
    HttpConfig,
    LicenseConfig,
    LoggingConfig,
    RemapTable,
    load_config_from_path,
)
from provmeta.core.patterns import NON_STANDARD_STATEMENTS


CONFIG_TOML = """\
[license]
use_detector = false
detector_command = ["licensee", "detect", "--json=false"]
non_standard_statements = [["Distributed under the Foo terms", "Foo-1.0"]]

[license.urls]
"Foo-1.0" = "https://example.com/foo"

[forge]
enabled = false
timeout = 5

[forge.repositories]
mypkg = "https://github.com/owner/mypkg"

[remap.names]
"Build Bot" = false
"J. Doe" = "Jane Doe"

[remap.keywords]
elisp = "lisp"
tools = ""

[logging]
level = "DEBUG"
"""


def test_defaults():
    cfg = ExtractionConfig()
    assert cfg.license.use_detector is True
    assert cfg.license.detector_command == ("licensee", "detect")
    assert cfg.license.non_standard_statements == NON_STANDARD_STATEMENTS
    assert cfg.license.urls["GPL-3"] == DEFAULT_LICENSE_URLS["GPL-3"]
    assert cfg.forge.enabled is True
    assert len(cfg.remap.names) == 0


def test_load_toml(tmp_path):
    path = tmp_path / "provmeta.toml"
    path.write_text(CONFIG_TOML, encoding="utf-8")

    cfg = load_config_from_path(path)

    assert cfg.license.use_detector is False
    assert cfg.license.detector_command == ("licensee", "detect", "--json=false")
    assert cfg.license.non_standard_statements == (("Distributed under the Foo terms", "Foo-1.0"),)
    assert dict(cfg.license.urls) == {"Foo-1.0": "https://example.com/foo"}
    assert cfg.forge.enabled is False
    assert cfg.forge.timeout == 5.0
    assert cfg.forge.repositories["mypkg"] == "https://github.com/owner/mypkg"
    assert cfg.remap.names.lookup("Build Bot") == (True, None)
    assert cfg.remap.names.apply("J. Doe") == "Jane Doe"
    assert cfg.remap.keywords.apply_all(["elisp", "tools", "emacs"]) == ["lisp", "emacs"]
    assert cfg.logging.level == "DEBUG"


def test_json_round_trip(tmp_path):
    cfg = ExtractionConfig()
    cfg.remap = dataclasses.replace(cfg.remap, names=RemapTable({"Build Bot": None, "J. Doe": "Jane Doe"}))
    cfg.forge = ForgeConfig(repositories={"mypkg": "gh:owner/mypkg"})
    path = tmp_path / "provmeta.json"

    cfg.to_json(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["remap"]["names"] == {"Build Bot": False, "J. Doe": "Jane Doe"}
    assert "client" not in data["http"]

    loaded = load_config_from_path(path)
    assert loaded.remap.names == cfg.remap.names
    assert dict(loaded.forge.repositories) == {"mypkg": "gh:owner/mypkg"}
    assert loaded.license.non_standard_statements == NON_STANDARD_STATEMENTS


def test_unknown_keys_rejected():
    with pytest.raises(ValueError, match="Unsupported options"):
        ExtractionConfig.from_dict({"bogus": 1})
    with pytest.raises(ValueError, match="Unsupported options"):
        ExtractionConfig.from_dict({"license": {"use_detecter": False}})


def test_non_mapping_rejected():
    with pytest.raises(TypeError):
        ExtractionConfig.from_dict(["license"])


@pytest.mark.parametrize(
    "data",
    [
        {"remap": {"names": {"Jane": 3}}},
        {"remap": {"keywords": ["elisp"]}},
        {"license": {"non_standard_statements": [["only one"]]}},
        {"license": {"detector_command": []}},
    ],
)
def test_malformed_tables_rejected(data):
    with pytest.raises(ValueError):
        ExtractionConfig.from_dict(data)


def test_unsupported_extension(tmp_path):
    path = tmp_path / "provmeta.yaml"
    path.write_text("license: {}\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported config extension"):
        load_config_from_path(path)


def test_remap_table_behaviour():
    table = RemapTable([("a", "b"), ("gone", None), ("also-gone", "")])
    assert "a" in table
    assert table.lookup("missing") == (False, "missing")
    assert table.apply("gone") is None
    assert table.apply("other") == "other"
    assert table.apply_all(["a", "gone", "also-gone", "c"]) == ["b", "c"]
    assert table.to_dict() == {"a": "b", "gone": False, "also-gone": False}


def test_remap_table_rejects_bad_entries():
    with pytest.raises(ValueError):
        RemapTable({"": "x"})
    with pytest.raises(ValueError):
        RemapTable([("only-key",)])
    with pytest.raises(ValueError):
        RemapTable({"k": ["list"]})


def test_section_configs_are_read_only():
    cfg = ExtractionConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.license.use_detector = False
    with pytest.raises(TypeError):
        cfg.license.urls["GPL-3"] = "https://example.com"


def test_http_config_builds_without_mutating():
    http = HttpConfig(timeout=3.0)
    client = http.build_client()
    assert client._default_timeout == 3.0
    assert http.client is None
    assert http.build_client() is not client


def test_http_config_returns_preset_client():
    preset = HttpConfig(timeout=1.0).build_client()
    http = HttpConfig(client=preset)
    assert http.build_client() is preset


def test_license_urls_default_is_factory_built():
    (urls_field,) = [f for f in dataclasses.fields(LicenseConfig) if f.name == "urls"]
    assert urls_field.default is dataclasses.MISSING
    assert urls_field.default_factory is not dataclasses.MISSING
    assert dict(LicenseConfig().urls) == dict(DEFAULT_LICENSE_URLS)


def test_license_config_validates_statements():
    with pytest.raises(ValueError):
        LicenseConfig(non_standard_statements=(("text", ""),))


def test_logging_config_apply():
    cfg = LoggingConfig(level="DEBUG", propagate=False, logger_name="provmeta.test.config")
    cfg.apply()

    logger = logging.getLogger("provmeta.test.config")
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
