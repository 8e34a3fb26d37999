"""JSON HTTP API for the RAG use cases."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict
from typing import Any, Protocol

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule
from werkzeug.wrappers import Request, Response

from luminor.rag.facade import (
    ChatResponseDTO,
    DocumentDTO,
    IndexDocumentDTO,
    SearchResultDTO,
)
from luminor.rag.service import EmptyContentError

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


class _RagUseCases(Protocol):
    def index_document(self, dto: IndexDocumentDTO) -> DocumentDTO: ...

    def search(self, query: str, limit: int, threshold: float) -> list[SearchResultDTO]: ...

    def chat(self, query: str, limit: int, threshold: float) -> ChatResponseDTO: ...

    def delete_document(self, document_id: str) -> None: ...


class _InvalidBody(Exception):
    pass


def _write_json(status: int, value: Any) -> Response:
    return Response(json.dumps(value) + "\n", status=status, mimetype="application/json")


def _error(status: int, message: str) -> Response:
    return _write_json(status, {"error": message})


def _decode(request: Request) -> dict[str, Any]:
    try:
        data = json.loads(request.get_data(as_text=True))
    except ValueError:
        raise _InvalidBody() from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _InvalidBody()
    return data


def _string(data: dict[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _InvalidBody()
    return value


def _int(data: dict[str, Any], name: str) -> int:
    value = data.get(name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise _InvalidBody()
    return value


def _float(data: dict[str, Any], name: str) -> float:
    value = data.get(name)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _InvalidBody()
    return float(value)


def _metadata(data: dict[str, Any]) -> dict[str, str] | None:
    value = data.get("metadata")
    if value is None:
        return None
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        raise _InvalidBody()
    return value


def _search_results(dtos: list[SearchResultDTO]) -> list[dict[str, Any]]:
    return [asdict(dto) for dto in dtos]


class RagHandler:
    """Request handlers of the RAG JSON API."""

    def __init__(self, rag: _RagUseCases) -> None:
        self._rag = rag

    def _query_request(self, request: Request) -> tuple[str, int, float]:
        data = _decode(request)
        return _string(data, "query"), _int(data, "limit"), _float(data, "threshold")

    def handle_index_document(self, request: Request) -> Response:
        try:
            data = _decode(request)
            title = _string(data, "title")
            source_type = _string(data, "source_type")
            content = _string(data, "content")
            metadata = _metadata(data)
        except _InvalidBody:
            return _error(400, "invalid request body")

        if not title or not content:
            return _error(400, "title and content are required")
        if not source_type:
            source_type = "text"

        try:
            doc = self._rag.index_document(
                IndexDocumentDTO(
                    title=title, source_type=source_type, content=content, metadata=metadata
                )
            )
        except EmptyContentError:
            return _error(400, "document content is empty")
        except Exception:
            logger.exception("index document failed")
            return _error(500, "failed to index document")

        return _write_json(
            201, {"id": doc.id, "title": doc.title, "source_type": doc.source_type}
        )

    def handle_search(self, request: Request) -> Response:
        try:
            query, limit, threshold = self._query_request(request)
        except _InvalidBody:
            return _error(400, "invalid request body")
        if not query:
            return _error(400, "query is required")

        try:
            results = self._rag.search(query, limit, threshold)
        except Exception:
            logger.exception("search failed")
            return _error(500, "search failed")

        return _write_json(200, {"results": _search_results(results)})

    def handle_chat(self, request: Request) -> Response:
        try:
            query, limit, threshold = self._query_request(request)
        except _InvalidBody:
            return _error(400, "invalid request body")
        if not query:
            return _error(400, "query is required")

        try:
            response = self._rag.chat(query, limit, threshold)
        except Exception:
            logger.exception("chat failed")
            return _error(500, "chat failed")

        return _write_json(
            200, {"answer": response.answer, "sources": _search_results(response.sources)}
        )

    def handle_delete_document(self, request: Request, document_id: str) -> Response:
        if not document_id:
            return _error(400, "document ID is required")
        try:
            self._rag.delete_document(document_id)
        except Exception:
            logger.exception("delete document failed (document_id=%s)", document_id)
            return _error(500, "failed to delete document")
        return Response(status=204)


def create_app(rag: _RagUseCases) -> WSGIApp:
    """Build a WSGI app serving the RAG API routes."""
    handler = RagHandler(rag)
    url_map = Map(
        [
            Rule("/api/rag/documents", methods=["POST"], endpoint="index"),
            Rule("/api/rag/documents/<document_id>", methods=["DELETE"], endpoint="delete"),
            Rule("/api/rag/search", methods=["POST"], endpoint="search"),
            Rule("/api/rag/chat", methods=["POST"], endpoint="chat"),
        ]
    )
    endpoints: dict[str, Callable[..., Response]] = {
        "index": handler.handle_index_document,
        "delete": handler.handle_delete_document,
        "search": handler.handle_search,
        "chat": handler.handle_chat,
    }

    def app(environ, start_response):
        request = Request(environ)
        adapter = url_map.bind_to_environ(environ)
        try:
            endpoint, args = adapter.match()
            response = endpoints[endpoint](request, **args)
        except HTTPException as err:
            return err(environ, start_response)
        return response(environ, start_response)

    return app