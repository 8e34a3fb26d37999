"""Request context carrying locale, translator and base path."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from luminor.platform.i18n.locale import Locale, default_locale, parse_locale
from luminor.platform.i18n.translator import Translator

CONTEXT_ENVIRON_KEY = "luminor.context"

_LOCALE_KEY = "i18n_locale"
_TRANSLATOR_KEY = "i18n_translator"
_BASE_PATH_KEY = "i18n_base_path"


class Context:
    """An immutable bag of request-scoped values."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[Any, Any] | None = None) -> None:
        self._values = dict(values or {})

    def with_value(self, key: Any, value: Any) -> Context:
        """Return a new context that also holds ``key``."""
        values = dict(self._values)
        values[key] = value
        return Context(values)

    def value(self, key: Any, default: Any = None) -> Any:
        """Return the value stored under ``key``, or ``default``."""
        return self._values.get(key, default)


def context_from_environ(environ: MutableMapping[str, Any]) -> Context:
    """Return the context attached to a WSGI environ, or an empty one."""
    ctx = environ.get(CONTEXT_ENVIRON_KEY)
    return ctx if isinstance(ctx, Context) else Context()


def with_locale(ctx: Context, locale: Locale) -> Context:
    return ctx.with_value(_LOCALE_KEY, locale)


def locale_from_context(ctx: Context) -> Locale:
    """Return the context's locale, or the default if it has none."""
    locale = ctx.value(_LOCALE_KEY)
    if not isinstance(locale, Locale):
        return default_locale()
    return locale


def with_translator(ctx: Context, translator: Translator) -> Context:
    return ctx.with_value(_TRANSLATOR_KEY, translator)


def translator_from_context(ctx: Context) -> Translator | None:
    translator = ctx.value(_TRANSLATOR_KEY)
    return translator if isinstance(translator, Translator) else None


def with_base_path(ctx: Context, path: str) -> Context:
    """Store the locale-less request path, always starting with a slash."""
    if not path:
        path = "/"
    if not path.startswith("/"):
        path = "/" + path
    return ctx.with_value(_BASE_PATH_KEY, path)


def base_path_from_context(ctx: Context) -> str:
    path = ctx.value(_BASE_PATH_KEY)
    return path if isinstance(path, str) and path else "/"


def t(ctx: Context, key: str, **kwargs: Any) -> str:
    """Translate ``key`` in the context's locale; return the key if no translator is set."""
    translator = translator_from_context(ctx)
    if translator is None:
        return key
    return translator.message(locale_from_context(ctx), key, **kwargs)


def t_plural(ctx: Context, key: str, count: int, **kwargs: Any) -> str:
    """Translate the plural form of ``key`` for ``count``."""
    translator = translator_from_context(ctx)
    if translator is None:
        return key
    return translator.plural(locale_from_context(ctx), key, count, **kwargs)


def localized_path(ctx: Context, path: str) -> str:
    """Prefix ``path`` with the context's locale unless it already has one."""
    locale = locale_from_context(ctx)
    if not path:
        return "/" + locale.value
    if not path.startswith("/"):
        path = "/" + path
    first = path[1:].split("/", 1)[0]
    if parse_locale(first) is not None:
        return path
    if path == "/":
        return "/" + locale.value
    return "/" + locale.value + path


def alternate_localized_path(ctx: Context, locale: Locale) -> str:
    """Return the current page's path in another locale."""
    base = base_path_from_context(ctx)
    if base == "/":
        return "/" + locale.value
    return "/" + locale.value + base