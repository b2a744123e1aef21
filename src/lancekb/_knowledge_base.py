"""KnowledgeBase — async facade exposing add / search / list operations."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from lancekb.api import AddDocumentsRequest, ApiResponse, SearchRequest, ToolResult
from lancekb.config import DEFAULT_SEARCH_LIMIT, DEFAULT_TABLE_NAME
from lancekb.embeddings import load_embedding_model
from lancekb.store._lance import VectorStore
from lancekb.store.ingest import flatten_documents

if TYPE_CHECKING:
    from types import TracebackType

    from lancekb.config import KnowledgeBaseConfig
    from lancekb.embeddings.protocols import EmbeddingModel

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """Wires a :class:`VectorStore` to one embedding model.

    Every operation returns a :class:`ToolResult`.  Failures of any kind are
    logged and reported as ``success=False`` with the error text; nothing
    is retried and nothing is partially reported.

    Only one embedding call runs at a time across the whole instance: both
    ingestion and search hold a shared :class:`asyncio.Lock` while they
    embed and write.  The local backend is not reentrant, and the remote
    variant is kept to the same memory profile.

    Usage::

        async with await KnowledgeBase.from_config(KnowledgeBaseConfig()) as kb:
            await kb.add_documents({"documents": [{"name": "a", "chunks": ["x"]}]})
            result = await kb.search({"query": "x"})
    """

    def __init__(
        self,
        store: VectorStore,
        model: EmbeddingModel,
        *,
        default_table: str | None = None,
        default_limit: int | None = None,
    ) -> None:
        self._store = store
        self._model = model
        self._default_table = default_table or DEFAULT_TABLE_NAME
        self._default_limit = default_limit or DEFAULT_SEARCH_LIMIT
        self._embed_lock = asyncio.Lock()

    @classmethod
    async def from_config(cls, config: KnowledgeBaseConfig) -> KnowledgeBase:
        """Connect the store and load the embedding model described by *config*."""
        store = await VectorStore.open(config.db_path)
        logger.info("Loading embedding model...")
        try:
            model = await load_embedding_model(
                config.embedding_endpoint,
                config.embedding_model,
                config.api_key,
            )
        except Exception:
            store.close()
            raise
        return cls(
            store,
            model,
            default_table=config.default_table,
            default_limit=config.default_limit,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def add_documents(self, request: AddDocumentsRequest | dict[str, Any]) -> ToolResult:
        """Embed and store every chunk of every document in the request."""
        try:
            req = AddDocumentsRequest.model_validate(request)
            table_name = req.table_name or self._default_table
            batch = flatten_documents(doc.to_document() for doc in req.documents)

            async with self._embed_lock:
                await self._store.add_texts(table_name, batch.texts, batch.metadatas, self._model)

            msg = (
                f"Successfully added {batch.document_count} documents "
                f"({batch.chunk_count} chunks) to table '{table_name}'"
            )
            logger.info(msg)
            return self._success(msg)
        except Exception as e:
            logger.error("Add documents failed: %s", e, exc_info=True)
            return ToolResult(success=False, message=str(e))

    async def search(self, request: SearchRequest | dict[str, Any]) -> ToolResult:
        """Semantic search; results are closest first."""
        try:
            req = SearchRequest.model_validate(request)
            table_name = req.table_name or self._default_table
            limit = req.limit or self._default_limit

            async with self._embed_lock:
                results = await self._store.search(table_name, req.query, limit, self._model)

            return self._success([r.to_dict() for r in results])
        except Exception as e:
            logger.error("Search failed: %s", e, exc_info=True)
            return ToolResult(success=False, message=str(e))

    async def list_tables(self) -> ToolResult:
        """List every table in the store."""
        try:
            tables = await self._store.list_tables()
            return self._success(tables)
        except Exception as e:
            logger.error("List tables failed: %s", e, exc_info=True)
            return ToolResult(success=False, message=str(e))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release the embedding model and the store connection."""
        await self._model.close()
        self._store.close()

    async def __aenter__(self) -> KnowledgeBase:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def store(self) -> VectorStore:
        return self._store

    @property
    def model(self) -> EmbeddingModel:
        return self._model

    @property
    def default_table(self) -> str:
        return self._default_table

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _success(data: Any) -> ToolResult:
        envelope = ApiResponse.success(data)
        return ToolResult(success=True, message=envelope.message, content=envelope.to_json())
