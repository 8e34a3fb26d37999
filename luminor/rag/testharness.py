"""Factories for RAG objects used in tests."""

from __future__ import annotations

from luminor.platform.clock import RealClock
from luminor.rag.document import Document, new_document


def make_document(title: str, content: str) -> Document:
    """Create a plain-text document stamped with the current time."""
    return new_document(title, "text", content, None, RealClock().now())