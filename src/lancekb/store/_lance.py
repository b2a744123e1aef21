"""VectorStore — LanceDB tables of embedded text chunks."""

from __future__ import annotations

import inspect
import json
import logging
import uuid
from typing import TYPE_CHECKING, Any

import lancedb
import numpy as np
import pyarrow as pa

from lancekb.exceptions import DimensionMismatchError, SchemaError, TableNotFoundError
from lancekb.store.results import reconstruct
from lancekb.store.schema import (
    DISTANCE_COLUMN,
    ID_COLUMN,
    METADATA_COLUMN,
    TEXT_COLUMN,
    table_schema,
    vector_dimension,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from lancedb.db import AsyncConnection
    from lancedb.table import AsyncTable

    from lancekb.store.types import SearchResult

logger = logging.getLogger(__name__)

_LIST_PAGE_SIZE = 1000
_EMPTY_METADATA = "{}"
_DISTANCE_TYPE = "cosine"


class VectorStore:
    """Owns one LanceDB connection and every table opened through it.

    Tables are created lazily by :meth:`add_texts`; their vector dimension
    is fixed by the first batch written and never changes afterwards.

    Usage::

        store = await VectorStore.open("./lancedb_data")
        await store.add_texts("docs", ["hello"], [{"name": "greeting"}], model)
        results = await store.search("docs", "hi", 5, model)
        store.close()
    """

    def __init__(self, path: str) -> None:
        self._path = path
        self._db: AsyncConnection | None = None

    @classmethod
    async def open(cls, path: str) -> VectorStore:
        """Create a store and connect it to *path*."""
        store = cls(path)
        await store.connect()
        return store

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the LanceDB connection."""
        logger.info("Connecting to LanceDB at %s", self._path)
        self._db = await lancedb.connect_async(self._path)

    def close(self) -> None:
        """Close the connection."""
        if self._db is not None:
            self._db.close()
            self._db = None

    @property
    def path(self) -> str:
        return self._path

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def create_or_open_table(self, name: str, dimension: int) -> AsyncTable:
        """Open *name* if it exists, otherwise create it at *dimension*.

        Opening never touches the existing schema, so *dimension* is ignored
        for a table that is already there.
        """
        db = self._require_db()
        if await self.has_table(name):
            return await db.open_table(name)

        logger.info("Creating table '%s' with dimension %d", name, dimension)
        return await db.create_table(name, schema=table_schema(dimension), exist_ok=True)

    async def open_table(self, name: str) -> AsyncTable:
        """Open an existing table, raising :class:`TableNotFoundError` otherwise."""
        db = self._require_db()
        if not await self.has_table(name):
            raise TableNotFoundError(name)
        return await db.open_table(name)

    async def has_table(self, name: str) -> bool:
        return name in await self.list_tables()

    async def list_tables(self) -> list[str]:
        """Return every table name in the store."""
        db = self._require_db()
        names: list[str] = []
        page_token: str | None = None
        while True:
            response = await db.list_tables(page_token=page_token, limit=_LIST_PAGE_SIZE)
            names.extend(response.tables)
            page_token = response.page_token
            # An empty or missing token ends the listing.
            if not page_token or not response.tables:
                return names

    async def table_dimension(self, name: str) -> int:
        """Return the vector width declared by table *name*."""
        table = await self.open_table(name)
        return vector_dimension(await table.schema())

    async def count_rows(self, name: str) -> int:
        table = await self.open_table(name)
        return await table.count_rows()

    # ------------------------------------------------------------------
    # Ingest / search
    # ------------------------------------------------------------------

    async def add_texts(
        self,
        table_name: str,
        texts: Sequence[str],
        metadatas: Sequence[dict[str, Any]],
        model: Any,
    ) -> int:
        """Embed *texts* and append them to *table_name* in one write.

        ``metadatas[i]`` is stored with ``texts[i]``; texts past the end of
        *metadatas* get ``{}``.  Returns the number of rows written.
        """
        if not texts:
            return 0

        vectors = await _embed(model, list(texts))
        if not vectors:
            return 0

        dimension = len(vectors[0])
        if dimension == 0:
            msg = f"Embedding model returned an empty vector for table '{table_name}'"
            raise SchemaError(msg)

        table = await self.create_or_open_table(table_name, dimension)
        schema = await table.schema()
        expected = vector_dimension(schema)
        for vector in vectors:
            if len(vector) != expected:
                raise DimensionMismatchError(table_name, expected, len(vector))

        batch = self._build_batch(schema, texts, vectors, metadatas)
        await table.add(pa.Table.from_batches([batch], schema=schema))
        logger.debug("Appended %d rows to table '%s'", batch.num_rows, table_name)
        return batch.num_rows

    async def search(
        self,
        table_name: str,
        query: str,
        limit: int,
        model: Any,
    ) -> list[SearchResult]:
        """Return the *limit* records of *table_name* closest to *query*."""
        table = await self.open_table(table_name)

        vectors = await _embed(model, [query])
        if not vectors or not vectors[0]:
            msg = f"Embedding model returned no vector for the query on table '{table_name}'"
            raise SchemaError(msg)

        hits = await (
            table.query()
            .nearest_to(np.asarray(vectors[0], dtype=np.float32))
            .distance_type(_DISTANCE_TYPE)
            .limit(limit)
            .to_arrow()
        )

        return [
            reconstruct(
                record_id=row[ID_COLUMN],
                text=row[TEXT_COLUMN],
                metadata=row[METADATA_COLUMN],
                distance=row[DISTANCE_COLUMN],
            )
            for row in hits.to_pylist()
        ]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _build_batch(
        schema: pa.Schema,
        texts: Sequence[str],
        vectors: list[list[float]],
        metadatas: Sequence[dict[str, Any]],
    ) -> pa.RecordBatch:
        """Build the columnar batch: generated ids, texts, vectors, metadata JSON."""
        dimension = vector_dimension(schema)
        ids = [str(uuid.uuid4()) for _ in texts]
        meta = [
            json.dumps(metadatas[i]) if i < len(metadatas) else _EMPTY_METADATA
            for i in range(len(texts))
        ]
        flat = pa.array(np.asarray(vectors, dtype=np.float32).reshape(-1), type=pa.float32())

        return pa.RecordBatch.from_arrays(
            [
                pa.array(ids, type=pa.string()),
                pa.array(list(texts), type=pa.string()),
                pa.FixedSizeListArray.from_arrays(flat, dimension),
                pa.array(meta, type=pa.string()),
            ],
            schema=schema,
        )

    def _require_db(self) -> AsyncConnection:
        """Return the connection, raising if not connected."""
        if self._db is None:
            msg = "Not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._db


async def _embed(model: Any, texts: list[str]) -> list[list[float]]:
    """Embed a batch of texts, handling both sync and async models."""
    result = model.embed(texts)
    if inspect.isawaitable(result):
        return await result
    return result
