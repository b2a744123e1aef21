"""Store-level value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class SearchResult:
    """A single hit from :meth:`VectorStore.search`.

    Attributes:
        id: Record identifier.
        name: Document name promoted out of the stored metadata.
        content: The chunk text that matched.
        score: ``1 - cosine distance`` (higher is more similar).
        metadata: Remaining metadata, without ``name`` and ``description``.
        description: Document description, if one was stored.
    """

    id: str
    name: str
    content: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire shape; ``description`` appears only when set."""
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "score": self.score,
            "metadata": dict(self.metadata),
        }
        if self.description is not None:
            out["description"] = self.description
        return out
