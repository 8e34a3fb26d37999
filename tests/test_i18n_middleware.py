import pytest
from werkzeug.test import Client

from luminor.platform.i18n.context import context_from_environ, locale_from_context, t
from luminor.platform.i18n.locale import Locale
from luminor.platform.i18n.middleware import LocaleMiddleware
from luminor.platform.i18n.translator import Translator


@pytest.fixture
def seen():
    return {}


@pytest.fixture
def client(seen):
    translator = Translator(
        Locale.EN,
        {Locale.EN: {"title": "Dashboard"}, Locale.FR: {"title": "Tableau de bord"}},
    )

    def app(environ, start_response):
        seen["path"] = environ["PATH_INFO"]
        seen["ctx"] = context_from_environ(environ)
        start_response("200 OK", [("Content-Type", "text/plain")])
        return [environ["PATH_INFO"].encode()]

    return Client(LocaleMiddleware(app, translator))


def test_redirects_unprefixed_routes(client):
    response = client.get("/about", headers={"Accept-Language": "de-DE,de;q=0.9"})
    assert response.status_code == 308
    assert response.headers["Location"] == "/de/about"
    assert "Accept-Language" in response.headers.get("Vary", "")


def test_strips_locale_prefix_for_router(client, seen):
    response = client.get("/fr/dashboard")
    assert response.status_code == 200
    assert seen["path"] == "/dashboard"
    assert locale_from_context(seen["ctx"]) == Locale.FR
    assert response.headers["Content-Language"] == "fr"
    assert t(seen["ctx"], "title") == "Tableau de bord"


def test_root_redirects_to_default_locale(client):
    response = client.get("/")
    assert response.status_code == 308
    assert response.headers["Location"] == "/en"


def test_redirect_keeps_query(client):
    response = client.get("/about?page=2")
    assert response.headers["Location"] == "/en/about?page=2"


def test_locale_root_maps_to_slash(client, seen):
    response = client.get("/de/")
    assert response.status_code == 200
    assert seen["path"] == "/"
    assert response.headers["Vary"] == "Accept-Language"


def test_path_is_cleaned(client):
    response = client.get("/de/a/../b")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "/b"
    assert response.headers["Content-Language"] == "de"


@pytest.mark.parametrize("path", ["/static/app.css", "/favicon.ico", "/static/img/logo"])
def test_static_and_files_pass_through(client, seen, path):
    response = client.get(path)
    assert response.status_code == 200
    assert seen["path"] == path
    assert "Content-Language" not in response.headers