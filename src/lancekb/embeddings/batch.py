"""Packed inference batches and the embedding kinds a backend returns.

A packed batch concatenates the token sequences of every input text into one
contiguous buffer.  ``cumulative_seq_lengths`` marks span boundaries, so
text ``i`` occupies ``input_ids[offsets[i]:offsets[i + 1]]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class PooledEmbedding:
    """One vector summarizing an entire input text."""

    values: list[float]


@dataclass(frozen=True, slots=True)
class TokenEmbeddings:
    """One vector per token of an input text."""

    values: list[list[float]]


Embedding = Union[PooledEmbedding, TokenEmbeddings]


@dataclass(frozen=True, slots=True)
class PackedBatch:
    """Flattened token batch consumed by an inference backend.

    Attributes:
        input_ids: Token ids of all texts, concatenated.
        token_type_ids: Token type ids, aligned with ``input_ids``.
        position_ids: Per-text positions (restart at 0 for every text).
        cumulative_seq_lengths: ``[0, len(t0), len(t0)+len(t1), ...]``.
        max_length: Length of the longest single text.
        pooled_indices: Text indices that need one pooled vector.
        raw_indices: Text indices that need per-token vectors.
    """

    input_ids: list[int]
    token_type_ids: list[int]
    position_ids: list[int]
    cumulative_seq_lengths: list[int]
    max_length: int
    pooled_indices: list[int] = field(default_factory=list)
    raw_indices: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.cumulative_seq_lengths) - 1

    def span(self, index: int) -> tuple[int, int]:
        """Return the ``[start, end)`` token range of text *index*."""
        return self.cumulative_seq_lengths[index], self.cumulative_seq_lengths[index + 1]


class PackedBatchBuilder:
    """Accumulates tokenized texts into a :class:`PackedBatch`."""

    def __init__(self) -> None:
        self._input_ids: list[int] = []
        self._token_type_ids: list[int] = []
        self._position_ids: list[int] = []
        self._offsets: list[int] = [0]
        self._max_length = 0

    def add(self, ids: Sequence[int], type_ids: Sequence[int]) -> None:
        """Append one text's token ids and type ids."""
        length = len(ids)
        self._input_ids.extend(ids)
        self._token_type_ids.extend(type_ids)
        self._position_ids.extend(range(length))
        self._offsets.append(self._offsets[-1] + length)
        self._max_length = max(self._max_length, length)

    def __len__(self) -> int:
        return len(self._offsets) - 1

    def build(self) -> PackedBatch:
        """Return the packed batch, requesting pooled output for every text."""
        return PackedBatch(
            input_ids=list(self._input_ids),
            token_type_ids=list(self._token_type_ids),
            position_ids=list(self._position_ids),
            cumulative_seq_lengths=list(self._offsets),
            max_length=self._max_length,
            pooled_indices=list(range(len(self))),
            raw_indices=[],
        )
