import json

import provmeta.core.metadata as metadata
from provmeta.core.config import ExtractionConfig, LicenseConfig, RemapConfig, RemapTable
from provmeta.core.contacts import Contact
from provmeta.core.metadata import (
    DocumentMetadata,
    extract_authors,
    extract_keywords,
    extract_maintainers,
    extract_metadata,
)


DOC = """\
;;; example.el --- Example package  -*- lexical-binding: t -*-

;; Copyright (C) 2012-2014 Jane Doe

;; Author: Jane Doe <jane@example.com>
;;         Build Bot <bot@example.com>
;; Maintainer: John Roe <john AT example DOT com>
;; Created: 4 March 2012
;; Updated: 2014-05-06
;; Keywords: Convenience, elisp tools

;; This program is free software; you can redistribute it and/or modify
;; it under the terms of the GNU General Public License as published by
;; the Free Software Foundation, either version 3 of the License, or
;; (at your option) any later version.
"""


def offline_config(**remap) -> ExtractionConfig:
    cfg = ExtractionConfig()
    cfg.license = LicenseConfig(use_detector=False)
    if remap:
        cfg.remap = RemapConfig(
            keywords=RemapTable(remap.get("keywords", {})),
            names=RemapTable(remap.get("names", {})),
        )
    return cfg


def test_extract_metadata_full_document():
    meta = extract_metadata(DOC, config=offline_config())

    assert meta.license == "GPL-3+"
    assert meta.license_url == "https://www.gnu.org/licenses/gpl-3.0.html"
    assert meta.created == "20120304"
    assert meta.updated == "20140506"
    assert meta.authors == [
        Contact("Jane Doe", "jane@example.com"),
        Contact("Build Bot", "bot@example.com"),
    ]
    assert meta.maintainers == [Contact("John Roe", "john@example.com")]
    assert meta.keywords == ["convenience", "elisp", "tools"]


def test_remap_tables_apply_when_sanitizing():
    cfg = offline_config(keywords={"elisp": "lisp", "tools": None}, names={"Build Bot": None})

    meta = extract_metadata(DOC, config=cfg)
    assert meta.authors == [Contact("Jane Doe", "jane@example.com")]
    assert meta.keywords == ["convenience", "lisp"]

    raw = extract_metadata(DOC, config=cfg, sanitize=False)
    assert len(raw.authors) == 2
    assert raw.keywords == ["convenience", "elisp", "tools"]


def test_maintainers_fall_back_to_authors():
    text = ";; Author: Jane Doe <jane@example.com>\n"
    assert extract_maintainers(text) == [Contact("Jane Doe", "jane@example.com")]
    assert extract_maintainers(text, fallback=False) == []


def test_authors_plural_header():
    text = ";; Authors: Jane Doe <jane@example.com>, John Roe <john@example.com>\n"
    assert extract_authors(text) == [
        Contact("Jane Doe", "jane@example.com"),
        Contact("John Roe", "john@example.com"),
    ]


def test_keywords_deduplicated():
    assert extract_keywords(";; Keywords: lisp, Lisp tools lisp\n") == ["lisp", "tools"]


def test_empty_document():
    meta = extract_metadata("", config=offline_config())
    assert meta == DocumentMetadata()


def test_failing_extractor_leaves_other_fields(monkeypatch, caplog):
    def boom(*_args, **_kwargs):
        raise RuntimeError("bad header")

    monkeypatch.setattr(metadata, "resolve_created_date", boom)
    with caplog.at_level("ERROR", logger="provmeta"):
        meta = extract_metadata(DOC, config=offline_config())

    assert meta.created is None
    assert meta.updated == "20140506"
    assert meta.license == "GPL-3+"
    assert "created" in caplog.text


def test_to_dict_is_json_ready():
    meta = extract_metadata(DOC, config=offline_config())
    data = json.loads(json.dumps(meta.to_dict()))
    assert data["authors"][0] == {"name": "Jane Doe", "email": "jane@example.com"}
    assert data["license"] == "GPL-3+"
