"""Documents, their chunks and search hits."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Document:
    """An indexed document."""

    id: str
    title: str
    source_type: str
    content: str
    metadata: dict[str, str]
    created_at: datetime
    updated_at: datetime


@dataclass
class Chunk:
    """A text fragment of a document with its embedding."""

    id: str
    document_id: str
    chunk_index: int
    content: str
    token_count: int
    embedding: list[float]
    created_at: datetime


@dataclass
class SearchResult:
    """A chunk with its similarity score and parent document details."""

    chunk_id: str = ""
    document_id: str = ""
    content: str = ""
    score: float = 0.0
    title: str = ""
    source_type: str = ""
    metadata: dict[str, str] = field(default_factory=dict)


def new_document(
    title: str,
    source_type: str,
    content: str,
    metadata: Mapping[str, str] | None,
    now: datetime,
) -> Document:
    """Create a document with a fresh id; missing metadata becomes an empty dict."""
    return Document(
        id=str(uuid.uuid4()),
        title=title,
        source_type=source_type,
        content=content,
        metadata=dict(metadata) if metadata is not None else {},
        created_at=now,
        updated_at=now,
    )


def new_chunk(
    document_id: str,
    index: int,
    content: str,
    token_count: int,
    embedding: list[float],
    now: datetime,
) -> Chunk:
    """Create a chunk with a fresh id."""
    return Chunk(
        id=str(uuid.uuid4()),
        document_id=document_id,
        chunk_index=index,
        content=content,
        token_count=token_count,
        embedding=embedding,
        created_at=now,
    )