"""Signed cookie sessions."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Any

from werkzeug.wrappers import Request, Response

SESSION_NAME = "luminor_session"
KEY_USER_ID = "user_id"
KEY_EMAIL = "email"
KEY_ROLES = "roles"
KEY_FLASH = "_flash"
KEY_ACTIVE_PARTY_ID = "active_party_id"
KEY_ACTIVE_PARTY_KIND = "active_party_kind"
KEY_ACTIVE_PARTY_NAME = "active_party_name"
KEY_ORG_NAME = "org_name"

DEFAULT_MAX_AGE = 86400 * 30

_CACHE_ENVIRON_KEY = "luminor.sessions"


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


class Session:
    """The values of one named session, as read from or written to a cookie."""

    def __init__(
        self, name: str, values: dict[str, Any] | None = None, is_new: bool = True
    ) -> None:
        self.name = name
        self.values: dict[str, Any] = dict(values or {})
        self.is_new = is_new

    def add_flash(self, value: Any) -> None:
        """Queue a value to be read once by a later request."""
        stored = self.values.get(KEY_FLASH)
        if not isinstance(stored, list):
            stored = []
            self.values[KEY_FLASH] = stored
        stored.append(value)

    def flashes(self) -> list[Any]:
        """Return the queued flash values and remove them from the session."""
        stored = self.values.pop(KEY_FLASH, None)
        return list(stored) if isinstance(stored, list) else []


class CookieSessionStore:
    """Keeps sessions in HMAC-signed cookies."""

    def __init__(
        self,
        secret_key: bytes,
        *,
        name: str = SESSION_NAME,
        path: str = "/",
        max_age: int = DEFAULT_MAX_AGE,
        http_only: bool = True,
        same_site: str = "Lax",
        secure: bool = False,
    ) -> None:
        if not secret_key:
            raise ValueError("session secret key must not be empty")
        self._key = bytes(secret_key)
        self.name = name
        self.path = path
        self.max_age = max_age
        self.http_only = http_only
        self.same_site = same_site
        self.secure = secure

    def _signature(self, payload: str) -> bytes:
        message = f"{self.name}|{payload}".encode("utf-8")
        return hmac.new(self._key, message, hashlib.sha256).digest()

    def _encode(self, values: dict[str, Any]) -> str:
        body = json.dumps(
            {"t": int(time.time()), "v": values}, separators=(",", ":")
        ).encode("utf-8")
        payload = _b64encode(body)
        return payload + "." + _b64encode(self._signature(payload))

    def _decode(self, raw: str) -> dict[str, Any]:
        payload, sep, signature = raw.rpartition(".")
        if not sep or not payload:
            raise ValueError("invalid session cookie")
        try:
            given = _b64decode(signature)
        except ValueError:
            raise ValueError("invalid session cookie") from None
        if not hmac.compare_digest(given, self._signature(payload)):
            raise ValueError("session cookie signature mismatch")
        try:
            data = json.loads(_b64decode(payload))
        except ValueError:
            raise ValueError("invalid session cookie") from None
        if (
            not isinstance(data, dict)
            or not isinstance(data.get("v"), dict)
            or not isinstance(data.get("t"), int)
        ):
            raise ValueError("invalid session cookie")
        if self.max_age > 0 and time.time() - data["t"] > self.max_age:
            raise ValueError("session cookie expired")
        return data["v"]

    def get(self, request: Request) -> Session:
        """Return the request's session; raise ValueError if its cookie is invalid.

        The session is cached on the request, so repeated calls return the same object.
        """
        cache = request.environ.setdefault(_CACHE_ENVIRON_KEY, {})
        cached = cache.get(self.name)
        if cached is not None:
            return cached
        raw = request.cookies.get(self.name)
        if raw is None:
            session = Session(self.name)
        else:
            session = Session(self.name, self._decode(raw), is_new=False)
        cache[self.name] = session
        return session

    def save(self, session: Session, response: Response) -> None:
        """Write the session as a signed cookie on the response."""
        value = self._encode(session.values)
        response.set_cookie(
            session.name,
            value,
            max_age=self.max_age,
            path=self.path,
            secure=self.secure,
            httponly=self.http_only,
            samesite=self.same_site,
        )
        session.is_new = False


def new_store(secret_key: str) -> CookieSessionStore:
    """Create the application's cookie store: 30 days, HttpOnly, SameSite=Lax."""
    return CookieSessionStore(secret_key.encode("utf-8"))