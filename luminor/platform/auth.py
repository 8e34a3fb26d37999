"""Authenticated user in the request context, and guards built on it."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from werkzeug.utils import redirect
from werkzeug.wrappers import Request

from luminor.platform.i18n.context import (
    CONTEXT_ENVIRON_KEY,
    Context,
    context_from_environ,
    localized_path,
)
from luminor.platform.session import (
    KEY_ACTIVE_PARTY_ID,
    KEY_ACTIVE_PARTY_KIND,
    KEY_ACTIVE_PARTY_NAME,
    KEY_EMAIL,
    KEY_ORG_NAME,
    KEY_ROLES,
    KEY_USER_ID,
    CookieSessionStore,
)

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]

_USER_KEY = "auth_user"
_DEFAULT_PARTY_KIND = "property_manager"


@dataclass(frozen=True)
class User:
    """The signed-in user and the party they currently act for."""

    id: str
    email: str = ""
    roles: tuple[str, ...] = ()
    active_party_id: str = ""
    active_party_kind: str = ""
    active_party_name: str = ""
    org_name: str = ""


def with_user(ctx: Context, user: User) -> Context:
    return ctx.with_value(_USER_KEY, user)


def user_from_context(ctx: Context) -> User | None:
    """Return the user in the context, or None."""
    user = ctx.value(_USER_KEY)
    return user if isinstance(user, User) else None


def must_user_from_context(ctx: Context) -> User:
    """Return the user in the context; raise LookupError if there is none."""
    user = user_from_context(ctx)
    if user is None:
        raise LookupError("auth: no user in context")
    return user


def is_authenticated(ctx: Context) -> bool:
    return user_from_context(ctx) is not None


def _str_value(values: dict[str, Any], key: str) -> str:
    value = values.get(key)
    return value if isinstance(value, str) else ""


def _roles(values: dict[str, Any]) -> tuple[str, ...]:
    roles = values.get(KEY_ROLES)
    if isinstance(roles, list) and all(isinstance(role, str) for role in roles):
        return tuple(roles)
    return ()


def _redirect(environ, start_response, path: str):
    target = localized_path(context_from_environ(environ), path)
    return redirect(target, code=303)(environ, start_response)


def load_user(store: CookieSessionStore) -> Callable[[WSGIApp], WSGIApp]:
    """Middleware putting the session's user, if any, into the request context."""

    def middleware(app: WSGIApp) -> WSGIApp:
        def wrapped(environ, start_response):
            try:
                session = store.get(Request(environ))
            except ValueError as err:
                logger.warning("failed to get session: %s", err)
                return app(environ, start_response)

            values = session.values
            user_id = values.get(KEY_USER_ID)
            if not isinstance(user_id, str) or not user_id:
                return app(environ, start_response)

            user = User(
                id=user_id,
                email=_str_value(values, KEY_EMAIL),
                roles=_roles(values),
                active_party_id=_str_value(values, KEY_ACTIVE_PARTY_ID),
                active_party_kind=_str_value(values, KEY_ACTIVE_PARTY_KIND),
                active_party_name=_str_value(values, KEY_ACTIVE_PARTY_NAME),
                org_name=_str_value(values, KEY_ORG_NAME),
            )
            ctx = with_user(context_from_environ(environ), user)
            return app({**environ, CONTEXT_ENVIRON_KEY: ctx}, start_response)

        return wrapped

    return middleware


def require_auth(app: WSGIApp) -> WSGIApp:
    """Redirect anonymous requests to the sign-in page."""

    def wrapped(environ, start_response):
        if not is_authenticated(context_from_environ(environ)):
            return _redirect(environ, start_response, "/sign-in")
        return app(environ, start_response)

    return wrapped


def require_party_kind(kind: str) -> Callable[[WSGIApp], WSGIApp]:
    """Let through only users whose active party is of ``kind``.

    An empty party kind counts as ``property_manager``.
    """

    def middleware(app: WSGIApp) -> WSGIApp:
        def wrapped(environ, start_response):
            user = user_from_context(context_from_environ(environ))
            if user is None:
                return _redirect(environ, start_response, "/sign-in")
            effective = user.active_party_kind or _DEFAULT_PARTY_KIND
            if effective != kind:
                return _redirect(environ, start_response, "/dashboard")
            return app(environ, start_response)

        return wrapped

    return middleware


def require_guest(app: WSGIApp) -> WSGIApp:
    """Redirect signed-in users to the dashboard."""

    def wrapped(environ, start_response):
        if is_authenticated(context_from_environ(environ)):
            return _redirect(environ, start_response, "/dashboard")
        return app(environ, start_response)

    return wrapped