import logging

import pytest
from werkzeug.test import Client

from luminor.platform.httplog import logging_middleware


def _app(status_line):
    def app(environ, start_response):
        start_response(status_line, [("Content-Type", "text/plain")])
        return [b"body"]

    return app


def test_middleware_passes_status_through():
    client = Client(logging_middleware(_app("201 Created")))
    resp = client.get("/test", buffered=True)
    assert resp.status_code == 201
    assert resp.get_data() == b"body"


@pytest.mark.parametrize("status_line,code", [("201 Created", 201), ("404 Not Found", 404)])
def test_middleware_logs_request(caplog, status_line, code):
    client = Client(logging_middleware(_app(status_line)))
    with caplog.at_level(logging.INFO, logger="luminor.platform.httplog"):
        client.get("/test", buffered=True)
    messages = [record.getMessage() for record in caplog.records]
    assert len(messages) == 1
    assert "method=GET" in messages[0]
    assert "path=/test" in messages[0]
    assert f"status={code}" in messages[0]