"""RemoteEmbedding — embeddings from an OpenAI-compatible HTTP endpoint."""

from __future__ import annotations

import logging
from typing import Any

import openai
from openai import AsyncOpenAI, Omit

from lancekb.exceptions import EmbeddingError

logger = logging.getLogger(__name__)

# The SDK refuses to build a client without a key; keyless requests drop the header.
_PLACEHOLDER_API_KEY = "unused"


class RemoteEmbedding:
    """Embedding model served by ``POST {base_url}/v1/embeddings``.

    Uses ``AsyncOpenAI`` pointed at *base_url*, so any server speaking the
    OpenAI embeddings wire format works (vLLM, TEI, Ollama, OpenAI itself).
    A batch is sent as a single request; a non-2xx status or a malformed
    body fails the whole batch.  The client never retries.

    The optional *api_key* is sent as ``Authorization: Bearer <key>`` and is
    never logged.  *http_client* (an ``httpx.AsyncClient``) replaces the
    default transport.
    """

    def __init__(
        self,
        base_url: str,
        *,
        model: str,
        api_key: str | None = None,
        http_client: Any = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._extra_headers: dict[str, Any] = {} if api_key else {"Authorization": Omit()}
        self._client: AsyncOpenAI = AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            api_key=api_key or _PLACEHOLDER_API_KEY,
            max_retries=0,
            http_client=http_client,
        )

    def __repr__(self) -> str:
        return f"RemoteEmbedding(base_url={self._base_url!r}, model={self._model!r})"

    # ------------------------------------------------------------------
    # EmbeddingModel protocol
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts* with one API call."""
        if not texts:
            return []

        logger.debug("Requesting %d embeddings from %s", len(texts), self._base_url)
        try:
            response = await self._client.embeddings.create(
                input=texts,
                model=self._model,
                encoding_format="float",
                extra_headers=self._extra_headers,
            )
        except (openai.OpenAIError, ValueError) as e:
            msg = f"Embedding request to {self._base_url} failed: {e}"
            raise EmbeddingError(msg) from e

        return self._parse_response(response, expected=len(texts))

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model

    @property
    def base_url(self) -> str:
        """Return the endpoint base URL (without the ``/v1`` suffix)."""
        return self._base_url

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._client.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _parse_response(self, response: Any, *, expected: int) -> list[list[float]]:
        """Return vectors in input order, rejecting malformed bodies."""
        try:
            data = list(response.data)
            # Sort by index to ensure order matches input
            if all(getattr(item, "index", None) is not None for item in data):
                data.sort(key=lambda item: item.index)
            vectors = [[float(x) for x in item.embedding] for item in data]
        except (AttributeError, TypeError, ValueError) as e:
            msg = f"Malformed embeddings response from {self._base_url}: {e}"
            raise EmbeddingError(msg) from e

        if len(vectors) != expected:
            msg = (
                f"Malformed embeddings response from {self._base_url}: "
                f"expected {expected} embeddings, got {len(vectors)}"
            )
            raise EmbeddingError(msg)
        return vectors
