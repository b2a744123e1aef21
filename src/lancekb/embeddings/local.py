"""LocalEmbedding — tokenizer + in-process inference backend."""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

from lancekb.embeddings.batch import PackedBatchBuilder, PooledEmbedding
from lancekb.exceptions import EmbeddingError

try:
    from huggingface_hub import hf_hub_download
    from tokenizers import Tokenizer

    _HAS_TOKENIZERS = True
except ImportError:  # pragma: no cover
    _HAS_TOKENIZERS = False

if TYPE_CHECKING:
    from lancekb.embeddings.batch import Embedding, PackedBatch

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "Qwen/Qwen3-Embedding-0.6B"

_WEIGHTS_FILE = "model.safetensors"
_CONFIG_FILE = "config.json"
_TOKENIZER_FILE = "tokenizer.json"


class LocalEmbedding:
    """Embedding model running in this process.

    *tokenizer* must expose ``encode_batch(texts, add_special_tokens=True)``
    returning encodings with ``ids`` and ``type_ids``; *backend* must expose
    ``embed(PackedBatch) -> dict[int, Embedding]``.  The backend is not
    reentrant, so every call goes through a :class:`threading.Lock`, and the
    CPU-bound work runs in a thread via :func:`asyncio.to_thread`.
    """

    def __init__(self, tokenizer: Any, backend: Any, *, model_name: str = DEFAULT_MODEL_ID) -> None:
        self._tokenizer = tokenizer
        self._backend = backend
        self._model_name = model_name
        self._lock = threading.Lock()

    @classmethod
    def from_pretrained(
        cls,
        model_id: str = DEFAULT_MODEL_ID,
        *,
        cache_dir: str | Path | None = None,
    ) -> LocalEmbedding:
        """Download *model_id* from the Hugging Face Hub and load it.

        Fetches the weights, config, and tokenizer definition, disables
        tokenizer padding, and builds a mean-pooled float32 backend.
        """
        if not _HAS_TOKENIZERS:
            msg = (
                "tokenizers and huggingface-hub are required for local embeddings. "
                "Install them with: pip install lancekb[local]"
            )
            raise ImportError(msg)

        from lancekb.embeddings.backend import TransformerBackend

        logger.info("Downloading embedding model %s", model_id)
        weights_path = hf_hub_download(model_id, _WEIGHTS_FILE, cache_dir=cache_dir)
        hf_hub_download(model_id, _CONFIG_FILE, cache_dir=cache_dir)
        tokenizer_path = hf_hub_download(model_id, _TOKENIZER_FILE, cache_dir=cache_dir)
        model_dir = Path(weights_path).parent

        tokenizer = Tokenizer.from_file(str(tokenizer_path))
        tokenizer.no_padding()

        backend = TransformerBackend.from_pretrained(model_dir)
        logger.info("Loaded embedding model %s from %s", model_id, model_dir)
        return cls(tokenizer, backend, model_name=model_id)

    # ------------------------------------------------------------------
    # Sync methods
    # ------------------------------------------------------------------

    def embed_sync(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts* (synchronous)."""
        if not texts:
            return []

        with self._lock:
            tokenizer, backend = self._tokenizer, self._backend
            if tokenizer is None or backend is None:
                msg = f"Embedding model {self._model_name!r} is closed"
                raise EmbeddingError(msg)
            batch = self._pack(tokenizer, texts)
            embeddings = backend.embed(batch)

        return self._collect(embeddings, len(texts))

    # ------------------------------------------------------------------
    # Async methods (EmbeddingModel protocol)
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts* in a thread pool."""
        if not texts:
            return []
        return await asyncio.to_thread(self.embed_sync, texts)

    @property
    def model_name(self) -> str:
        """Return the model name."""
        return self._model_name

    async def close(self) -> None:
        """Drop references to the tokenizer and backend.

        Waits for an in-flight batch to finish first.
        """
        await asyncio.to_thread(self._release)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _release(self) -> None:
        with self._lock:
            self._backend = None
            self._tokenizer = None

    def _pack(self, tokenizer: Any, texts: list[str]) -> PackedBatch:
        try:
            encodings = tokenizer.encode_batch(texts, add_special_tokens=True)
        except Exception as e:
            msg = f"Tokenization failed: {e}"
            raise EmbeddingError(msg) from e

        builder = PackedBatchBuilder()
        for encoding in encodings:
            builder.add(encoding.ids, encoding.type_ids)
        return builder.build()

    def _collect(self, embeddings: dict[int, Embedding], count: int) -> list[list[float]]:
        """Place pooled vectors at their text positions; missing slots stay empty."""
        results: list[list[float]] = [[] for _ in range(count)]
        for idx, embedding in embeddings.items():
            if not 0 <= idx < count:
                continue
            if isinstance(embedding, PooledEmbedding):
                results[idx] = list(embedding.values)
            else:
                logger.warning(
                    "Backend returned a non-pooled embedding for input %d; ignoring it", idx
                )
        return results
