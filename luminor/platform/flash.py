"""One-time messages carried across a redirect in the session."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from werkzeug.wrappers import Request, Response

from luminor.platform.i18n.context import (
    CONTEXT_ENVIRON_KEY,
    Context,
    context_from_environ,
    t,
)
from luminor.platform.session import CookieSessionStore, Session

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]

_FLASH_KEY = "flash_messages"


class FlashType(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class FlashMessage:
    type: FlashType
    content: str


def _to_message(raw: Any) -> FlashMessage | None:
    if not isinstance(raw, dict):
        return None
    content = raw.get("content")
    if not isinstance(content, str):
        return None
    try:
        flash_type = FlashType(raw.get("type"))
    except ValueError:
        return None
    return FlashMessage(flash_type, content)


def _cookie_headers(store: CookieSessionStore, session: Session) -> list[tuple[str, str]]:
    carrier = Response()
    store.save(session, carrier)
    return [("Set-Cookie", value) for value in carrier.headers.getlist("Set-Cookie")]


def set_flash(
    request: Request,
    response: Response,
    store: CookieSessionStore,
    flash_type: FlashType,
    content: str,
) -> None:
    """Queue a flash message in the session and save it on the response."""
    try:
        session = store.get(request)
    except ValueError as err:
        logger.warning("flash: failed to get session: %s", err)
        return
    session.add_flash({"type": FlashType(flash_type).value, "content": content})
    try:
        store.save(session, response)
    except (TypeError, ValueError) as err:
        logger.warning("flash: failed to save session: %s", err)


def set_flash_key(
    request: Request,
    response: Response,
    store: CookieSessionStore,
    flash_type: FlashType,
    key: str,
    **kwargs: Any,
) -> None:
    """Translate ``key`` in the request's locale and queue it as a flash message."""
    content = t(context_from_environ(request.environ), key, **kwargs)
    set_flash(request, response, store, flash_type, content)


def flash_middleware(store: CookieSessionStore) -> Callable[[WSGIApp], WSGIApp]:
    """Middleware moving queued flash messages from the session into the request context."""

    def middleware(app: WSGIApp) -> WSGIApp:
        def wrapped(environ, start_response):
            try:
                session = store.get(Request(environ))
            except ValueError:
                return app(environ, start_response)

            raw = session.flashes()
            extra_headers: list[tuple[str, str]] = []
            if raw:
                try:
                    extra_headers = _cookie_headers(store, session)
                except (TypeError, ValueError) as err:
                    logger.warning("flash: failed to save session after reading: %s", err)

            messages = [m for m in map(_to_message, raw) if m is not None]
            ctx = context_from_environ(environ).with_value(_FLASH_KEY, messages)
            inner = {**environ, CONTEXT_ENVIRON_KEY: ctx}
            if not extra_headers:
                return app(inner, start_response)

            def with_cookie(status, headers, exc_info=None):
                return start_response(status, list(headers) + extra_headers, exc_info)

            return app(inner, with_cookie)

        return wrapped

    return middleware


def messages_from_context(ctx: Context) -> list[FlashMessage]:
    """Return the flash messages loaded for this request."""
    messages = ctx.value(_FLASH_KEY)
    return list(messages) if isinstance(messages, list) else []