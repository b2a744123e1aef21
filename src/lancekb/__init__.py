"""lancekb: a semantic knowledge base on LanceDB.

Embed text chunks with a remote or local model, store them in LanceDB
tables, and answer nearest-neighbor queries over them.
"""

__version__ = "0.1.0"

from lancekb._knowledge_base import KnowledgeBase
from lancekb.config import DEFAULT_TABLE_NAME, KnowledgeBaseConfig
from lancekb.embeddings import (
    DEFAULT_MODEL_ID,
    EmbeddingModel,
    LocalEmbedding,
    RemoteEmbedding,
    load_embedding_model,
)
from lancekb.exceptions import (
    DimensionMismatchError,
    EmbeddingError,
    EmbeddingModelLoadError,
    LanceKBError,
    SchemaError,
    TableNotFoundError,
)
from lancekb.api import (
    AddDocumentsRequest,
    ApiResponse,
    DocumentInput,
    SearchRequest,
    ToolResult,
)
from lancekb.store import Document, SearchResult, VectorStore

__all__ = [
    "DEFAULT_MODEL_ID",
    "DEFAULT_TABLE_NAME",
    "AddDocumentsRequest",
    "ApiResponse",
    "DimensionMismatchError",
    "Document",
    "DocumentInput",
    "EmbeddingError",
    "EmbeddingModel",
    "EmbeddingModelLoadError",
    "KnowledgeBase",
    "KnowledgeBaseConfig",
    "LanceKBError",
    "LocalEmbedding",
    "RemoteEmbedding",
    "SchemaError",
    "SearchRequest",
    "SearchResult",
    "TableNotFoundError",
    "ToolResult",
    "VectorStore",
    "__version__",
    "load_embedding_model",
]
