"""Document indexing, similarity search and retrieval-augmented chat."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import timezone
from typing import Protocol, TypeVar, runtime_checkable

from luminor.platform.clock import Clock
from luminor.rag.chunker import chunk_text, estimate_tokens
from luminor.rag.document import Chunk, Document, SearchResult, new_chunk, new_document

_CHUNK_TARGET_TOKENS = 500
_CHUNK_OVERLAP_TOKENS = 50
_EMBED_CONCURRENCY = 5
_DEFAULT_LIMIT = 5
_DEFAULT_THRESHOLD = 0.3

_SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer the user's question based on the provided context. "
    "If the context doesn't contain enough information to answer, say so clearly. "
    "Cite your sources by referencing the source numbers."
)

T = TypeVar("T")


class DocumentNotFoundError(LookupError):
    def __init__(self, message: str = "document not found") -> None:
        super().__init__(message)


class EmptyContentError(ValueError):
    def __init__(self, message: str = "document content is empty") -> None:
        super().__init__(message)


class EmptyQueryError(ValueError):
    def __init__(self, message: str = "search query is empty") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Message:
    """A chat message for the generator."""

    role: str
    content: str


@runtime_checkable
class Repository(Protocol):
    """Persistence for documents and chunks."""

    def create_document(self, doc: Document) -> None: ...

    def create_chunks(self, chunks: list[Chunk]) -> None: ...

    def find_similar_chunks(
        self, embedding: list[float], limit: int, threshold: float
    ) -> list[SearchResult]: ...

    def delete_document_and_chunks(self, document_id: str) -> None: ...

    def execute_in_tx(self, fn: Callable[[Repository], T]) -> T: ...


@runtime_checkable
class Embedder(Protocol):
    """Generates vector embeddings for text."""

    def embed(self, model: str, text: str) -> list[float]: ...


@runtime_checkable
class Generator(Protocol):
    """Produces chat completions."""

    def chat(self, model: str, messages: list[Message]) -> str: ...


class RagService:
    """Orchestrates indexing, search and retrieval-augmented generation."""

    def __init__(
        self,
        repo: Repository,
        embedder: Embedder,
        generator: Generator,
        embed_model: str,
        chat_model: str,
        clock: Clock,
    ) -> None:
        self._repo = repo
        self._embedder = embedder
        self._generator = generator
        self._embed_model = embed_model
        self._chat_model = chat_model
        self._clock = clock

    def _embed_all(self, texts: list[str]) -> list[list[float]]:
        embeddings: list[list[float]] = [[] for _ in texts]
        with ThreadPoolExecutor(max_workers=_EMBED_CONCURRENCY) as pool:
            futures = {
                pool.submit(self._embedder.embed, self._embed_model, text): index
                for index, text in enumerate(texts)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    embeddings[index] = future.result()
                except Exception as err:
                    for pending in futures:
                        pending.cancel()
                    err.add_note(f"embed chunk {index}")
                    raise
        return embeddings

    def index_document(
        self,
        title: str,
        source_type: str,
        content: str,
        metadata: Mapping[str, str] | None = None,
    ) -> Document:
        """Chunk, embed and store a document in one transaction; return it."""
        if not content.strip():
            raise EmptyContentError()

        now = self._clock.now().astimezone(timezone.utc)
        doc = new_document(title, source_type, content, metadata, now)
        texts = chunk_text(content, _CHUNK_TARGET_TOKENS, _CHUNK_OVERLAP_TOKENS)
        embeddings = self._embed_all(texts)
        chunks = [
            new_chunk(doc.id, index, text, estimate_tokens(text), embedding, now)
            for index, (text, embedding) in enumerate(zip(texts, embeddings))
        ]

        def store(tx_repo: Repository) -> None:
            try:
                tx_repo.create_document(doc)
            except Exception as err:
                err.add_note("create document")
                raise
            try:
                tx_repo.create_chunks(chunks)
            except Exception as err:
                err.add_note("create chunks")
                raise

        self._repo.execute_in_tx(store)
        return doc

    def search(
        self, query: str, limit: int = 0, threshold: float = 0.0
    ) -> list[SearchResult]:
        """Return the chunks most similar to the query.

        A non-positive limit means 5 and a non-positive threshold means 0.3.
        """
        if not query.strip():
            raise EmptyQueryError()
        if limit <= 0:
            limit = _DEFAULT_LIMIT
        if threshold <= 0:
            threshold = _DEFAULT_THRESHOLD

        try:
            embedding = self._embedder.embed(self._embed_model, query)
        except Exception as err:
            err.add_note("embed query")
            raise
        try:
            return list(self._repo.find_similar_chunks(embedding, limit, threshold))
        except Exception as err:
            err.add_note("find similar chunks")
            raise

    def chat(
        self, query: str, limit: int = 0, threshold: float = 0.0
    ) -> tuple[str, list[SearchResult]]:
        """Answer the query from retrieved context; return the answer and its sources."""
        results = self.search(query, limit, threshold)
        context_text = "\n\n".join(
            f"[Source {number}: {result.title}]\n{result.content}"
            for number, result in enumerate(results, start=1)
        )
        user_prompt = (
            f"Context:\n{context_text}\n\nQuestion: {query}" if context_text else query
        )
        messages = [
            Message(role="system", content=_SYSTEM_PROMPT),
            Message(role="user", content=user_prompt),
        ]
        try:
            answer = self._generator.chat(self._chat_model, messages)
        except Exception as err:
            err.add_note("generate answer")
            raise
        return answer, results

    def delete_document(self, document_id: str) -> None:
        """Remove a document and all its chunks."""
        self._repo.delete_document_and_chunks(document_id)