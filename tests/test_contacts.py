import pytest

from provmeta.core.config import RemapTable
from provmeta.core.contacts import Contact, is_valid_email, parse_contact, parse_contacts


@pytest.mark.parametrize(
    "line, expected",
    [
        ("Jane Doe <jane@example.com>", Contact("Jane Doe", "jane@example.com")),
        ("Jane Doe (jane@example.com)", Contact("Jane Doe", "jane@example.com")),
        ("Jane Doe <Jane.Doe@Example.COM>", Contact("Jane Doe", "jane.doe@example.com")),
        ("Jane Doe <jane AT example DOT com>", Contact("Jane Doe", "jane@example.com")),
        ("Jane Doe (jane at example.com)", Contact("Jane Doe", "jane@example.com")),
        ("Jane Doe <jane [at] example [dot] org>", Contact("Jane Doe", "jane@example.org")),
        ("jane@example.com (Jane Doe)", Contact("Jane Doe", "jane@example.com")),
        ("jane@example.com", Contact(None, "jane@example.com")),
        ("Jane Doe", Contact("Jane Doe", None)),
        ("Doe, Jane <jane@example.com>", Contact("Doe, Jane", "jane@example.com")),
        ("Jane Doe 2012-2019 <jane@example.com>", Contact("Jane Doe", "jane@example.com")),
    ],
)
def test_parse_contact_forms(line, expected):
    assert parse_contact(line) == expected


@pytest.mark.parametrize(
    "line",
    ["Jane Doe <not-an-email>", "Jane Doe <jane@localhost>", "Jane Doe <jane@@example.com>"],
)
def test_invalid_email_keeps_name(line):
    assert parse_contact(line) == Contact("Jane Doe", None)


@pytest.mark.parametrize("line", [None, "", "   ", "<>", "()"])
def test_nothing_usable(line):
    assert parse_contact(line) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("jane@example.com", True),
        ("jane.doe+tag@mail.example.co.uk", True),
        ("jane@localhost", False),
        ("jane@-bad.com", False),
        ("jane.@example.com", False),
        ("@example.com", False),
    ],
)
def test_is_valid_email(value, expected):
    assert is_valid_email(value) is expected


def test_remap_replaces_name():
    remap = RemapTable({"J. Doe": "Jane Doe"})
    assert parse_contact("J. Doe <jane@example.com>", remap) == Contact("Jane Doe", "jane@example.com")


def test_remap_drop_removes_contact():
    remap = RemapTable({"Build Bot": None})
    assert parse_contact("Build Bot <bot@example.com>", remap) is None


def test_parse_contacts_splits_and_dedupes():
    lines = [
        "Jane Doe <jane@example.com>, John Roe <john AT example DOT com>",
        "Jane Doe <jane@example.com>",
        "",
    ]
    assert parse_contacts(lines) == [
        Contact("Jane Doe", "jane@example.com"),
        Contact("John Roe", "john@example.com"),
    ]


def test_parse_contacts_drops_remapped_entries():
    remap = RemapTable({"Build Bot": False})
    lines = ["Jane Doe <jane@example.com>", "Build Bot <bot@example.com>"]
    assert parse_contacts(lines, remap) == [Contact("Jane Doe", "jane@example.com")]


def test_single_address_with_comma_is_not_split():
    assert parse_contacts(["Doe, Jane <jane@example.com>"]) == [Contact("Doe, Jane", "jane@example.com")]
