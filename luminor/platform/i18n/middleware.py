"""WSGI middleware that routes requests by a locale path prefix."""

from __future__ import annotations

import posixpath
from collections.abc import Callable, Iterable
from typing import Any

from werkzeug.datastructures import Headers
from werkzeug.utils import redirect

from luminor.platform.i18n.context import (
    CONTEXT_ENVIRON_KEY,
    context_from_environ,
    with_base_path,
    with_locale,
    with_translator,
)
from luminor.platform.i18n.locale import Locale, parse_locale, resolve_from_accept_language
from luminor.platform.i18n.translator import Translator

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


def _clean_path(raw: str) -> str:
    cleaned = posixpath.normpath(raw) if raw else "."
    if cleaned == ".":
        return "/"
    while cleaned.startswith("//"):
        cleaned = cleaned[1:]
    return cleaned


def _extract_locale(raw_path: str) -> tuple[Locale, str] | None:
    parts = _clean_path(raw_path).lstrip("/").split("/")
    if not parts[0]:
        return None
    locale = parse_locale(parts[0])
    if locale is None:
        return None
    base = "/" + "/".join(parts[1:]) if len(parts) > 1 else "/"
    return locale, base


def _is_unlocalized_pass_through(path: str) -> bool:
    if path.startswith("/static/"):
        return True
    return "." in path.rsplit("/", 1)[-1]


def _add_vary(headers: Headers, value: str) -> None:
    for item in headers.getlist("Vary"):
        if any(token.strip().lower() == value.lower() for token in item.split(",")):
            return
    headers.add("Vary", value)


class LocaleMiddleware:
    """Redirects unprefixed paths to a locale and strips the prefix for the wrapped app."""

    def __init__(self, app: WSGIApp, translator: Translator) -> None:
        self.app = app
        self.translator = translator

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]):
        path = environ.get("PATH_INFO") or "/"
        if _is_unlocalized_pass_through(path):
            return self.app(environ, start_response)

        extracted = _extract_locale(path)
        if extracted is None:
            target = resolve_from_accept_language(environ.get("HTTP_ACCEPT_LANGUAGE", ""))
            return self._redirect(environ, start_response, target, path)

        locale, base_path = extracted
        ctx = context_from_environ(environ)
        ctx = with_translator(with_base_path(with_locale(ctx, locale), base_path), self.translator)
        inner_environ = {**environ, "PATH_INFO": base_path, CONTEXT_ENVIRON_KEY: ctx}

        def localized_start_response(status, headers, exc_info=None):
            merged = Headers(headers)
            _add_vary(merged, "Accept-Language")
            if "Content-Language" not in merged:
                merged["Content-Language"] = locale.value
            return start_response(status, merged.to_wsgi_list(), exc_info)

        return self.app(inner_environ, localized_start_response)

    @staticmethod
    def _redirect(environ, start_response, locale: Locale, path: str):
        target = "/" + locale.value
        if path != "/":
            target += path
        query = environ.get("QUERY_STRING", "")
        if query:
            target += "?" + query
        response = redirect(target, code=308)
        _add_vary(response.headers, "Accept-Language")
        return response(environ, start_response)