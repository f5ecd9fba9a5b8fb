"""Parsing of `Name <email>` display strings."""

from __future__ import annotations

import re
from dataclasses import dataclass

_DISPLAY_NAME_EMAIL = re.compile(r"^(?P<name>[^<]*?)\s*<(?P<email>[^<>]*)>\s*$")


@dataclass(frozen=True, slots=True)
class Identity:
    name: str
    email: str

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


def parse_display_name_email(display: str) -> Identity:
    """Split `"Name <email>"` into its parts.

    A string without an `<email>` suffix is treated as a bare name with an
    empty email.
    """

    value = display.strip()
    match = _DISPLAY_NAME_EMAIL.match(value)
    if match is None:
        return Identity(name=value, email="")
    return Identity(name=match.group("name").strip(), email=match.group("email").strip())
