"""EmbeddingModel protocol — the single capability every backend exposes."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingModel(Protocol):
    """Async protocol for batch text-to-vector embedding.

    ``embed`` is order preserving: ``result[i]`` is the vector for
    ``texts[i]``, and every vector has the model's fixed dimension.  An
    empty input returns an empty list without touching the backend.
    """

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts into vectors."""
        ...

    @property
    def model_name(self) -> str:
        """Name of the embedding model."""
        ...

    async def close(self) -> None:
        """Release the backend resource."""
        ...
