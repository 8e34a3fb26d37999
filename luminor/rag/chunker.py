"""Splitting text into overlapping word windows."""

from __future__ import annotations

_WORDS_PER_TOKEN = 0.75


def chunk_text(text: str, target_tokens: int, overlap_tokens: int) -> list[str]:
    """Split text into overlapping chunks of about ``target_tokens`` tokens each.

    One token is taken to be about 0.75 words. Whitespace is normalised to single spaces.
    """
    words = text.split()
    if not words:
        return []

    target_words = max(int(target_tokens * _WORDS_PER_TOKEN), 1)
    overlap_words = int(overlap_tokens * _WORDS_PER_TOKEN)
    if overlap_words >= target_words:
        overlap_words = target_words // 4
    step = max(target_words - overlap_words, 1)

    chunks: list[str] = []
    for start in range(0, len(words), step):
        end = min(start + target_words, len(words))
        chunks.append(" ".join(words[start:end]))
        if end == len(words):
            break
    return chunks


def estimate_tokens(text: str) -> int:
    """Return an approximate token count for the text."""
    return int(len(text.split()) / _WORDS_PER_TOKEN)