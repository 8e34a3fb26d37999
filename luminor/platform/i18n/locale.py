"""Supported locales and Accept-Language negotiation."""

from __future__ import annotations

import re
from enum import StrEnum


class Locale(StrEnum):
    """A locale the application can render."""

    EN = "en"
    DE = "de"
    FR = "fr"


_SUPPORTED: tuple[Locale, ...] = (Locale.EN, Locale.DE, Locale.FR)

_TAG = re.compile(r"[A-Za-z]{1,8}(?:-[A-Za-z0-9]{1,8})*|\*")
_QUALITY = re.compile(r"[qQ]\s*=\s*(\d+(?:\.\d*)?|\.\d+)")

# Three-letter ISO 639-2 codes that name a supported language.
_ISO639_ALIASES = {
    "eng": "en",
    "deu": "de",
    "ger": "de",
    "fra": "fr",
    "fre": "fr",
}


def supported_locales() -> list[Locale]:
    """Return a fresh list of the supported locales, default first."""
    return list(_SUPPORTED)


def default_locale() -> Locale:
    """Return the locale used when nothing better is known."""
    return Locale.EN


def parse_locale(raw: str) -> Locale | None:
    """Return the supported locale named by ``raw``, or None if there is none."""
    try:
        return Locale(raw.strip().lower())
    except ValueError:
        return None


def _parse_accept_language(header: str) -> list[str]:
    """Return the language tags of a header, best first; raise ValueError if malformed."""
    entries: list[tuple[float, str]] = []
    for item in header.split(","):
        item = item.strip()
        if not item:
            continue
        tag, _, params = item.partition(";")
        tag = tag.strip()
        if not _TAG.fullmatch(tag):
            raise ValueError(f"invalid language tag: {tag!r}")
        weight = 1.0
        if params:
            match = _QUALITY.fullmatch(params.strip())
            if match is None:
                raise ValueError(f"invalid quality: {params!r}")
            weight = float(match.group(1))
            if weight > 1.0:
                raise ValueError(f"quality out of range: {weight}")
        if weight <= 0.0:
            continue
        entries.append((weight, tag))
    entries.sort(key=lambda entry: -entry[0])
    return [tag for _, tag in entries]


def resolve_from_accept_language(header: str) -> Locale:
    """Pick the best supported locale for an Accept-Language header."""
    try:
        tags = _parse_accept_language(header)
    except ValueError:
        return default_locale()
    for tag in tags:
        primary = tag.split("-", 1)[0].lower()
        primary = _ISO639_ALIASES.get(primary, primary)
        locale = parse_locale(primary)
        if locale is not None:
            return locale
    return default_locale()