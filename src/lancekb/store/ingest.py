"""Ingestion pipeline — expand documents into one record per chunk."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

NAME_KEY = "name"
DESCRIPTION_KEY = "description"


@dataclass(frozen=True, slots=True)
class Document:
    """A named document split into text chunks.

    Attributes:
        name: Document name, copied into every chunk's metadata.
        chunks: Ordered text chunks; each becomes one record.
        description: Optional description, copied like ``name``.
        metadata: Metadata shared by all chunks of the document.
    """

    name: str
    chunks: list[str] = field(default_factory=list)
    description: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class IngestBatch:
    """Flat, parallel texts and metadatas ready for :meth:`VectorStore.add_texts`."""

    texts: list[str]
    metadatas: list[dict[str, Any]]
    document_count: int

    @property
    def chunk_count(self) -> int:
        return len(self.texts)


def inject_document_fields(
    metadata: Mapping[str, Any] | None,
    name: str,
    description: str | None = None,
) -> dict[str, Any]:
    """Return a copy of *metadata* with ``name`` (and ``description``) set.

    Document fields win over same-named keys in *metadata*.
    """
    merged = dict(metadata) if metadata else {}
    merged[NAME_KEY] = name
    if description is not None:
        merged[DESCRIPTION_KEY] = description
    return merged


def flatten_documents(documents: Iterable[Document]) -> IngestBatch:
    """Expand *documents* into one text/metadata pair per chunk."""
    texts: list[str] = []
    metadatas: list[dict[str, Any]] = []
    doc_count = 0

    for doc in documents:
        doc_count += 1
        base = inject_document_fields(doc.metadata, doc.name, doc.description)
        for chunk in doc.chunks:
            texts.append(chunk)
            metadatas.append(dict(base))

    return IngestBatch(texts=texts, metadatas=metadatas, document_count=doc_count)
