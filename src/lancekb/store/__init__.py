"""LanceDB-backed vector store — schema, ingestion, search, result reconstruction."""

from lancekb.store._lance import VectorStore
from lancekb.store.ingest import (
    Document,
    IngestBatch,
    flatten_documents,
    inject_document_fields,
)
from lancekb.store.results import (
    distance_to_score,
    extract_document_fields,
    parse_metadata,
    reconstruct,
)
from lancekb.store.schema import table_schema, vector_dimension
from lancekb.store.types import SearchResult

__all__ = [
    "Document",
    "IngestBatch",
    "SearchResult",
    "VectorStore",
    "distance_to_score",
    "extract_document_fields",
    "flatten_documents",
    "inject_document_fields",
    "parse_metadata",
    "reconstruct",
    "table_schema",
    "vector_dimension",
]
