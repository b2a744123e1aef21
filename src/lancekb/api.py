"""Request and response shapes for the add / search / list operations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from lancekb.store.ingest import Document

T = TypeVar("T")


class DocumentInput(BaseModel):
    """One document of an add-documents request."""

    name: str = Field(description="The name of the document")
    description: str | None = Field(
        default=None, description="Optional description of the document"
    )
    chunks: list[str] = Field(description="List of text chunks belonging to this document")
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="Additional custom metadata shared by all chunks in this document",
    )

    def to_document(self) -> Document:
        return Document(
            name=self.name,
            chunks=list(self.chunks),
            description=self.description,
            metadata=self.metadata,
        )


class AddDocumentsRequest(BaseModel):
    """Add a batch of documents to a table."""

    table_name: str | None = Field(
        default=None,
        description="The name of the table to add documents to (default: knowledge_base)",
    )
    documents: list[DocumentInput] = Field(description="List of documents to add")


class SearchRequest(BaseModel):
    """Semantic search over one table."""

    table_name: str | None = Field(
        default=None,
        description="The name of the table to search in (default: knowledge_base)",
    )
    query: str = Field(description="The query text")
    limit: int | None = Field(default=None, gt=0, description="Number of results to return")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: ``{code: 0, message: "success", data: ...}``."""

    code: int = 0
    message: str = "success"
    data: T | None = None

    @classmethod
    def success(cls, data: T) -> ApiResponse[T]:
        return cls(code=0, message="success", data=data)

    def to_json(self) -> str:
        """Pretty-printed JSON form of the envelope."""
        return json.dumps(self.model_dump(mode="json"), indent=2, ensure_ascii=False)


@dataclass
class ToolResult:
    """Result of a request-layer operation.

    On success ``content`` holds the JSON envelope; on failure ``message``
    holds the error text and ``content`` is ``None``.
    """

    success: bool
    message: str
    content: str | None = None
