import pytest
from werkzeug.test import Client, EnvironBuilder
from werkzeug.wrappers import Request, Response

from luminor.platform.auth import (
    User,
    is_authenticated,
    load_user,
    must_user_from_context,
    require_auth,
    require_guest,
    require_party_kind,
    user_from_context,
    with_user,
)
from luminor.platform.i18n.context import CONTEXT_ENVIRON_KEY, Context, context_from_environ, with_locale
from luminor.platform.i18n.locale import Locale
from luminor.platform.session import (
    KEY_ACTIVE_PARTY_ID,
    KEY_ACTIVE_PARTY_KIND,
    KEY_EMAIL,
    KEY_ROLES,
    KEY_USER_ID,
    SESSION_NAME,
    new_store,
)


def _recording_app(calls):
    def app(environ, start_response):
        calls.append(context_from_environ(environ))
        start_response("200 OK", [("Content-Type", "text/plain")])
        return [b"ok"]

    return app


def _user_ctx(kind):
    return with_user(
        Context(),
        User(id="user-1", email="test@example.com", active_party_id="party-1", active_party_kind=kind),
    )


def test_require_party_kind_allowed():
    calls = []
    client = Client(require_party_kind("property_manager")(_recording_app(calls)), use_cookies=False)
    resp = client.get("/property-management", environ_overrides={CONTEXT_ENVIRON_KEY: _user_ctx("property_manager")})
    assert len(calls) == 1
    assert resp.status_code == 200


def test_require_party_kind_blocked():
    calls = []
    client = Client(require_party_kind("property_manager")(_recording_app(calls)), use_cookies=False)
    resp = client.get("/property-management", environ_overrides={CONTEXT_ENVIRON_KEY: _user_ctx("tenant")})
    assert calls == []
    assert resp.status_code == 303
    assert resp.headers["Location"] == "/en/dashboard"


def test_require_party_kind_empty_kind_treated_as_property_manager():
    calls = []
    client = Client(require_party_kind("property_manager")(_recording_app(calls)), use_cookies=False)
    ctx = with_user(Context(), User(id="user-1", email="test@example.com"))
    resp = client.get("/property-management", environ_overrides={CONTEXT_ENVIRON_KEY: ctx})
    assert len(calls) == 1
    assert resp.status_code == 200


def test_require_party_kind_no_user_redirects():
    calls = []
    client = Client(require_party_kind("property_manager")(_recording_app(calls)), use_cookies=False)
    resp = client.get("/property-management")
    assert calls == []
    assert resp.status_code == 303
    assert resp.headers["Location"] == "/en/sign-in"


def test_load_user_reads_party_from_session():
    store = new_store("secret")
    request = Request(EnvironBuilder(path="/").get_environ())
    session = store.get(request)
    session.values[KEY_USER_ID] = "user-1"
    session.values[KEY_EMAIL] = "test@example.com"
    session.values[KEY_ROLES] = ["user"]
    session.values[KEY_ACTIVE_PARTY_ID] = "party-1"
    session.values[KEY_ACTIVE_PARTY_KIND] = "tenant"
    response = Response()
    store.save(session, response)
    cookie = response.headers["Set-Cookie"].split(";", 1)[0]

    calls = []
    client = Client(load_user(store)(_recording_app(calls)), use_cookies=False)
    resp = client.get("/", headers={"Cookie": cookie})

    assert resp.status_code == 200
    user = user_from_context(calls[0])
    assert user.active_party_id == "party-1"
    assert user.active_party_kind == "tenant"
    assert user.email == "test@example.com"
    assert user.roles == ("user",)


def test_load_user_without_session_leaves_anonymous():
    calls = []
    client = Client(load_user(new_store("secret"))(_recording_app(calls)), use_cookies=False)
    client.get("/")
    assert is_authenticated(calls[0]) is False


def test_load_user_with_invalid_cookie_passes_through():
    calls = []
    client = Client(load_user(new_store("secret"))(_recording_app(calls)), use_cookies=False)
    resp = client.get("/", headers={"Cookie": f"{SESSION_NAME}=garbage"})
    assert resp.status_code == 200
    assert user_from_context(calls[0]) is None


def test_require_auth_redirects_anonymous_to_localized_sign_in():
    calls = []
    client = Client(require_auth(_recording_app(calls)), use_cookies=False)
    ctx = with_locale(Context(), Locale.DE)
    resp = client.get("/dashboard", environ_overrides={CONTEXT_ENVIRON_KEY: ctx})
    assert calls == []
    assert resp.status_code == 303
    assert resp.headers["Location"] == "/de/sign-in"


def test_require_auth_lets_user_through():
    calls = []
    client = Client(require_auth(_recording_app(calls)), use_cookies=False)
    resp = client.get("/dashboard", environ_overrides={CONTEXT_ENVIRON_KEY: _user_ctx("tenant")})
    assert resp.status_code == 200
    assert must_user_from_context(calls[0]).id == "user-1"


def test_require_guest():
    calls = []
    client = Client(require_guest(_recording_app(calls)), use_cookies=False)
    blocked = client.get("/sign-in", environ_overrides={CONTEXT_ENVIRON_KEY: _user_ctx("tenant")})
    assert blocked.status_code == 303
    assert blocked.headers["Location"] == "/en/dashboard"
    allowed = client.get("/sign-in")
    assert allowed.status_code == 200
    assert len(calls) == 1


def test_must_user_from_context_raises_without_user():
    with pytest.raises(LookupError):
        must_user_from_context(Context())