"""HTTP client for an Ollama server's embedding and chat endpoints."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

import httpx

DEFAULT_TIMEOUT = 5 * 60.0


@dataclass(frozen=True)
class ChatMessage:
    """One message of a chat conversation."""

    role: str
    content: str


class OllamaError(Exception):
    """Raised when a request to the Ollama server fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class OllamaClient:
    """Talks to Ollama's HTTP API for embeddings and chat completions."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url
        self._http = httpx.Client(timeout=timeout)

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        self._http.close()

    def __enter__(self) -> OllamaClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(self, what: str, path: str, body: dict[str, Any]) -> Any:
        try:
            response = self._http.post(self.base_url + path, json=body)
        except httpx.HTTPError as err:
            raise OllamaError(f"{what} request: {err}") from err
        if response.status_code != 200:
            raise OllamaError(
                f"{what} request failed (status {response.status_code}): {response.text}",
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as err:
            raise OllamaError(f"decode {what} response: {err}") from err

    def embed(self, model: str, text: str) -> list[float]:
        """Return the embedding vector the model produces for ``text``."""
        data = self._post("embed", "/api/embeddings", {"model": model, "prompt": text})
        embedding = data.get("embedding") if isinstance(data, dict) else None
        if embedding is not None and (
            not isinstance(embedding, list)
            or not all(isinstance(x, (int, float)) for x in embedding)
        ):
            raise OllamaError("decode embed response: embedding is not a list of numbers")
        if not embedding:
            raise OllamaError("empty embedding returned")
        return [float(x) for x in embedding]

    def chat(self, model: str, messages: Iterable[ChatMessage]) -> str:
        """Send a non-streaming chat request and return the assistant's reply."""
        body = {
            "model": model,
            "messages": [asdict(message) for message in messages],
            "stream": False,
        }
        data = self._post("chat", "/api/chat", body)
        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content", "") if isinstance(message, dict) else ""
        if not isinstance(content, str):
            raise OllamaError("decode chat response: content is not a string")
        return content