import pytest

from provmeta.core.dates import _regex_date, resolve_created_date, resolve_date, resolve_updated_date
from provmeta.core.headers import HeaderBlock


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2012-03-04", "20120304"),
        ("2012/3/4", "20120304"),
        ("2012.03", "201203"),
        ("2012", "2012"),
        ("04.03.2012", "20120304"),
        ("01/02/2012", "20120201"),
        ("3/2012", "201203"),
        ("  2012-03-04  ", "20120304"),
        ("20120304", "20120304"),
    ],
)
def test_numeric_dates(value, expected):
    assert resolve_date(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("March 2012", "201203"),
        ("4 March 2012", "20120304"),
        ("Sun, 4 Mar 2012 10:15:00 +0100", "20120304"),
        ("Mar 4, 2012", "20120304"),
    ],
)
def test_calendar_dates(value, expected):
    assert resolve_date(value) == expected


def test_loose_match_inside_text():
    assert resolve_date("first released 2012-03-04 by the team") == "20120304"


@pytest.mark.parametrize("value", [None, "", "   ", "sometime soon"])
def test_unusable_dates_yield_none(value):
    assert resolve_date(value) is None


def test_output_shape():
    for value in ("2012-03-04", "March 2012", "2012"):
        out = resolve_date(value)
        assert out.isdigit()
        assert len(out) in (4, 6, 8)


DOC = """\
;;; example.el --- Example  -*- lexical-binding: t -*-

;; Author: Jane Doe <jane@example.com>
;; Created: 4 March 2012
;; Time-stamp: <2014-05-06 12:00:00 jdoe>
;; Version: 1.0
"""


def test_created_header():
    assert resolve_created_date(DOC) == "20120304"


def test_created_falls_back_to_date_header():
    assert resolve_created_date(";; Date: 2011-01-02\n") == "20110102"


def test_updated_from_time_stamp():
    assert resolve_updated_date(HeaderBlock(DOC)) == "20140506"


def test_updated_prefers_updated_header():
    text = ";; Last-Modified: 2015-01-01\n;; Updated: 2016-02-03\n"
    assert resolve_updated_date(text) == "20160203"


def test_unparseable_header_falls_through():
    text = ";; Updated: unknown\n;; Modified: 2017\n"
    assert resolve_updated_date(text) == "2017"


def test_missing_headers():
    assert resolve_created_date(";; Author: Jane\n") is None
    assert resolve_updated_date("") is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1999-2012", "1999"),
        ("copyright 1999-2012 Jane Doe", "1999"),
        ("2012-03/04", "201203"),
    ],
)
def test_loose_match_stops_at_number_boundaries(value, expected):
    assert _regex_date(value, anchored=False) == expected
