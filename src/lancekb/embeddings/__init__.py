"""Embedding models — protocol, remote and local variants, and the loader."""

from lancekb.embeddings._factory import load_embedding_model
from lancekb.embeddings.batch import (
    Embedding,
    PackedBatch,
    PackedBatchBuilder,
    PooledEmbedding,
    TokenEmbeddings,
)
from lancekb.embeddings.local import DEFAULT_MODEL_ID, LocalEmbedding
from lancekb.embeddings.protocols import EmbeddingModel
from lancekb.embeddings.remote import RemoteEmbedding

__all__ = [
    "DEFAULT_MODEL_ID",
    "Embedding",
    "EmbeddingModel",
    "LocalEmbedding",
    "PackedBatch",
    "PackedBatchBuilder",
    "PooledEmbedding",
    "RemoteEmbedding",
    "TokenEmbeddings",
    "load_embedding_model",
]

# Optional backend: import-guarded, available only when deps are installed.
try:
    from lancekb.embeddings.backend import TransformerBackend

    __all__.append("TransformerBackend")
except ImportError:  # pragma: no cover
    pass
