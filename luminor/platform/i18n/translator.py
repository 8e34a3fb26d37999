"""Message catalogs with fallback to a default locale."""

from __future__ import annotations

import json
from collections.abc import Mapping
from os import PathLike
from pathlib import Path
from typing import Any

from luminor.platform.i18n.locale import Locale, default_locale, supported_locales


def _interpolate(template: str, values: Mapping[str, Any]) -> str:
    result = template
    for name, value in values.items():
        result = result.replace("{" + name + "}", str(value))
    return result


class Translator:
    """Looks up messages per locale, falling back to the default locale."""

    def __init__(
        self, default: Locale | str, catalogs: Mapping[Locale | str, Mapping[str, str]]
    ) -> None:
        self._default_locale = Locale(default)
        self._catalogs: dict[Locale, dict[str, str]] = {
            Locale(locale): dict(messages) for locale, messages in catalogs.items()
        }

    def _lookup(self, locale: Locale | str, key: str) -> str | None:
        messages = self._catalogs.get(locale)
        if messages is not None and key in messages:
            return messages[key]
        return self._catalogs.get(self._default_locale, {}).get(key)

    def message(self, locale: Locale | str, key: str, **kwargs: Any) -> str:
        """Return the message for ``key`` with ``{name}`` placeholders filled in, or the key."""
        template = self._lookup(locale, key)
        if template is None:
            return key
        return _interpolate(template, kwargs)

    def plural(self, locale: Locale | str, key: str, count: int, **kwargs: Any) -> str:
        """Return ``key.one`` for a count of 1 and ``key.other`` otherwise."""
        form = "one" if count == 1 else "other"
        return self.message(locale, f"{key}.{form}", count=count, **kwargs)

    def missing_keys_for(self, locale: Locale | str) -> list[str]:
        """Return, sorted, the default-locale keys that ``locale`` lacks."""
        base = self._catalogs.get(self._default_locale, {})
        target = self._catalogs.get(locale, {})
        return sorted(key for key in base if key not in target)


def load_translator(directory: str | PathLike[str]) -> Translator:
    """Load ``<locale>.json`` for every supported locale from ``directory``."""
    root = Path(directory)
    catalogs: dict[Locale, dict[str, str]] = {}
    for locale in supported_locales():
        raw = (root / f"{locale.value}.json").read_text(encoding="utf-8")
        try:
            messages = json.loads(raw)
        except json.JSONDecodeError as err:
            raise ValueError(f"parse locale {locale.value}: {err}") from err
        if not isinstance(messages, dict) or not all(
            isinstance(value, str) for value in messages.values()
        ):
            raise ValueError(
                f"parse locale {locale.value}: catalog must map keys to strings"
            )
        catalogs[locale] = messages
    return Translator(default_locale(), catalogs)