"""Pick and build the embedding model variant once, at startup."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from lancekb.embeddings.local import DEFAULT_MODEL_ID, LocalEmbedding
from lancekb.embeddings.remote import RemoteEmbedding
from lancekb.exceptions import EmbeddingModelLoadError

if TYPE_CHECKING:
    from lancekb.embeddings.protocols import EmbeddingModel

logger = logging.getLogger(__name__)


async def load_embedding_model(
    endpoint: str | None = None,
    model_id: str | None = None,
    api_key: str | None = None,
) -> EmbeddingModel:
    """Return a remote model when *endpoint* is set, otherwise a local one.

    Local loading downloads weights, config, and tokenizer for *model_id*
    (default ``Qwen/Qwen3-Embedding-0.6B``).  Any failure raises
    :class:`EmbeddingModelLoadError`.
    """
    resolved_id = model_id or DEFAULT_MODEL_ID

    if endpoint is not None:
        logger.info("Using remote embedding endpoint %s (model %s)", endpoint, resolved_id)
        try:
            return RemoteEmbedding(endpoint, model=resolved_id, api_key=api_key)
        except Exception as e:
            msg = f"Failed to create remote embedding client for {endpoint}: {e}"
            raise EmbeddingModelLoadError(msg) from e

    logger.info("Loading local embedding model %s", resolved_id)
    try:
        return await asyncio.to_thread(LocalEmbedding.from_pretrained, resolved_id)
    except Exception as e:
        msg = f"Failed to load local embedding model {resolved_id!r}: {e}"
        raise EmbeddingModelLoadError(msg) from e
