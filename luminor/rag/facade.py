"""Public entry point of the RAG vertical: DTOs, events and the facade."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from luminor.platform.eventbus import EventBus, EventHandlerError
from luminor.rag.document import Document, SearchResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexDocumentDTO:
    """Data for indexing a new document."""

    title: str
    content: str
    source_type: str = "text"
    metadata: Mapping[str, str] | None = None


@dataclass(frozen=True)
class DocumentDTO:
    """An indexed document."""

    id: str = ""
    title: str = ""
    source_type: str = ""
    created_at: datetime | None = None


@dataclass(frozen=True)
class SearchResultDTO:
    """A search hit with its relevance score."""

    chunk_id: str = ""
    document_id: str = ""
    content: str = ""
    score: float = 0.0
    title: str = ""
    source_type: str = ""
    metadata: dict[str, str] | None = field(default_factory=dict)


@dataclass(frozen=True)
class ChatResponseDTO:
    """A generated answer and the sources it rests on."""

    answer: str = ""
    sources: list[SearchResultDTO] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentIndexedEvent:
    """Published once a document has been indexed."""

    document_id: str
    title: str


class _RagService(Protocol):
    def index_document(
        self, title: str, source_type: str, content: str, metadata: Mapping[str, str] | None
    ) -> Document: ...

    def search(self, query: str, limit: int, threshold: float) -> list[SearchResult]: ...

    def chat(
        self, query: str, limit: int, threshold: float
    ) -> tuple[str, list[SearchResult]]: ...

    def delete_document(self, document_id: str) -> None: ...


def _to_document_dto(doc: Document) -> DocumentDTO:
    return DocumentDTO(
        id=doc.id, title=doc.title, source_type=doc.source_type, created_at=doc.created_at
    )


def _to_search_result_dtos(results: list[SearchResult]) -> list[SearchResultDTO]:
    return [
        SearchResultDTO(
            chunk_id=r.chunk_id,
            document_id=r.document_id,
            content=r.content,
            score=r.score,
            title=r.title,
            source_type=r.source_type,
            metadata=r.metadata,
        )
        for r in results
    ]


class RagFacade:
    """Exposes the RAG use cases to other parts of the application."""

    def __init__(self, service: _RagService, bus: EventBus) -> None:
        self._service = service
        self._bus = bus

    def index_document(self, dto: IndexDocumentDTO) -> DocumentDTO:
        """Index a document and announce it on the bus; publishing failures are only logged."""
        try:
            doc = self._service.index_document(
                dto.title, dto.source_type, dto.content, dto.metadata
            )
        except Exception as err:
            err.add_note("index document")
            raise

        try:
            self._bus.publish(DocumentIndexedEvent(document_id=doc.id, title=doc.title))
        except EventHandlerError as err:
            logger.warning(
                "failed to publish DocumentIndexedEvent: %s (document_id=%s)", err, doc.id
            )
        return _to_document_dto(doc)

    def search(self, query: str, limit: int = 0, threshold: float = 0.0) -> list[SearchResultDTO]:
        """Return the chunks most relevant to the query."""
        try:
            results = self._service.search(query, limit, threshold)
        except Exception as err:
            err.add_note("search")
            raise
        return _to_search_result_dtos(results)

    def chat(self, query: str, limit: int = 0, threshold: float = 0.0) -> ChatResponseDTO:
        """Answer the query from retrieved context."""
        try:
            answer, results = self._service.chat(query, limit, threshold)
        except Exception as err:
            err.add_note("chat")
            raise
        return ChatResponseDTO(answer=answer, sources=_to_search_result_dtos(results))

    def delete_document(self, document_id: str) -> None:
        """Remove a document and its chunks."""
        self._service.delete_document(document_id)