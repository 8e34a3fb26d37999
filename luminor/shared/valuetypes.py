"""Validated value types shared across the application."""

from __future__ import annotations

import re
from dataclasses import dataclass

_ATEXT = r"[A-Za-z0-9!#$%&'*+\-/=?^_`{|}~\u0080-\U0010ffff]"
_DOT_ATOM = rf"{_ATEXT}+(?:\.{_ATEXT}+)*"
_QUOTED = r'"(?:[^"\\\r\n]|\\.)*"'
_ADDR_SPEC = rf"(?:{_DOT_ATOM}|{_QUOTED})@(?:{_DOT_ATOM}|\[[^\[\]\\]*\])"

_BARE_ADDRESS = re.compile(_ADDR_SPEC)
_NAMED_ADDRESS = re.compile(rf"[^<>]*<{_ADDR_SPEC}>")


def _is_valid_address(text: str) -> bool:
    return bool(_BARE_ADDRESS.fullmatch(text) or _NAMED_ADDRESS.fullmatch(text))


@dataclass(frozen=True)
class EmailAddress:
    """An immutable e-mail address; build validated ones with ``new_email_address``."""

    value: str = ""

    def __str__(self) -> str:
        return self.value

    def is_zero(self) -> bool:
        """Return True if the address is unset."""
        return self.value == ""


def new_email_address(email: str) -> EmailAddress:
    """Return a validated, trimmed and lower-cased address; raise ValueError if invalid."""
    normalized = email.strip().lower()
    if not normalized:
        raise ValueError("email address cannot be empty")
    if not _is_valid_address(normalized):
        raise ValueError(f"invalid email address: {email!r}")
    return EmailAddress(normalized)