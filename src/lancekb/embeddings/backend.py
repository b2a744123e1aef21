"""TransformerBackend — mean-pooled float32 inference over packed batches."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from lancekb.embeddings.batch import PooledEmbedding, TokenEmbeddings

try:
    import torch
    from transformers import AutoModel

    _HAS_TORCH = True
except ImportError:  # pragma: no cover
    _HAS_TORCH = False

if TYPE_CHECKING:
    from lancekb.embeddings.batch import Embedding, PackedBatch

logger = logging.getLogger(__name__)

POOLING_MEAN = "mean"


class TransformerBackend:
    """Inference backend wrapping a Hugging Face ``AutoModel``.

    The backend unpacks a :class:`PackedBatch` into a padded tensor, runs the
    model once, and returns ``{text_index: Embedding}``.  Pooled indices get
    the mean of the text's token states; raw indices get every token state.

    Not reentrant: callers must serialize :meth:`embed`.
    """

    def __init__(self, model: Any, *, pooling: str = POOLING_MEAN) -> None:
        if not _HAS_TORCH:
            msg = (
                "torch and transformers are required for local embeddings. "
                "Install them with: pip install lancekb[local]"
            )
            raise ImportError(msg)
        if pooling != POOLING_MEAN:
            msg = f"Unsupported pooling {pooling!r}; only 'mean' is available"
            raise ValueError(msg)
        self._model = model
        self._pooling = pooling
        config = getattr(model, "config", None)
        self._uses_token_types = bool(getattr(config, "type_vocab_size", 0))

    @classmethod
    def from_pretrained(cls, model_dir: str | Path) -> TransformerBackend:
        """Load weights and config from *model_dir* in float32, eval mode."""
        if not _HAS_TORCH:
            msg = (
                "torch and transformers are required for local embeddings. "
                "Install them with: pip install lancekb[local]"
            )
            raise ImportError(msg)
        model = AutoModel.from_pretrained(str(model_dir), torch_dtype=torch.float32)
        model.eval()
        return cls(model)

    @property
    def pooling(self) -> str:
        return self._pooling

    def embed(self, batch: PackedBatch) -> dict[int, Embedding]:
        """Run inference on *batch*."""
        count = len(batch)
        if count == 0:
            return {}

        width = max(batch.max_length, 1)
        input_ids = torch.zeros((count, width), dtype=torch.long)
        token_type_ids = torch.zeros((count, width), dtype=torch.long)
        position_ids = torch.zeros((count, width), dtype=torch.long)
        attention_mask = torch.zeros((count, width), dtype=torch.long)

        for i in range(count):
            start, end = batch.span(i)
            length = end - start
            if length == 0:
                continue
            input_ids[i, :length] = torch.tensor(batch.input_ids[start:end], dtype=torch.long)
            token_type_ids[i, :length] = torch.tensor(
                batch.token_type_ids[start:end], dtype=torch.long
            )
            position_ids[i, :length] = torch.tensor(
                batch.position_ids[start:end], dtype=torch.long
            )
            attention_mask[i, :length] = 1

        kwargs: dict[str, Any] = {
            "input_ids": input_ids,
            "attention_mask": attention_mask,
            "position_ids": position_ids,
        }
        if self._uses_token_types:
            kwargs["token_type_ids"] = token_type_ids

        with torch.inference_mode():
            output = self._model(**kwargs)
        hidden = output.last_hidden_state.to(torch.float32)

        results: dict[int, Embedding] = {}
        for idx in batch.pooled_indices:
            results[idx] = PooledEmbedding(values=self._mean_pool(hidden[idx], attention_mask[idx]))
        for idx in batch.raw_indices:
            length = int(attention_mask[idx].sum().item())
            results[idx] = TokenEmbeddings(values=hidden[idx, :length].tolist())
        return results

    @staticmethod
    def _mean_pool(states: Any, mask: Any) -> list[float]:
        """Average token states over the positions where *mask* is set."""
        weights = mask.unsqueeze(-1).to(states.dtype)
        total = (states * weights).sum(dim=0)
        denom = weights.sum(dim=0).clamp(min=1.0)
        return (total / denom).tolist()
