"""Unit tests for display name parsing."""

from __future__ import annotations

import pytest

from cherry_pick_backport.identity import Identity, parse_display_name_email


@pytest.mark.parametrize(
    ("display", "name", "email"),
    [
        ("Jane Author <jane@example.com>", "Jane Author", "jane@example.com"),
        ("GitHub <noreply@github.com>", "GitHub", "noreply@github.com"),
        (
            "github-actions[bot] <41898282+github-actions[bot]@users.noreply.github.com>",
            "github-actions[bot]",
            "41898282+github-actions[bot]@users.noreply.github.com",
        ),
        ("  Spaced Name   <spaced@example.com>  ", "Spaced Name", "spaced@example.com"),
    ],
)
def test_parse_name_and_email(display: str, name: str, email: str) -> None:
    assert parse_display_name_email(display) == Identity(name=name, email=email)


@pytest.mark.parametrize("display", ["Just A Name", "octocat", "broken <email", ""])
def test_without_email_whole_string_is_name(display: str) -> None:
    parsed = parse_display_name_email(display)

    assert parsed.name == display.strip()
    assert parsed.email == ""


def test_identity_str_renders_display_form() -> None:
    assert str(Identity(name="Jane", email="jane@example.com")) == "Jane <jane@example.com>"
