"""Tests for PackedBatchBuilder — flattened token batches with offsets."""

from __future__ import annotations

from lancekb.embeddings.batch import PackedBatch, PackedBatchBuilder


class TestPackedBatchBuilder:
    def test_offsets_are_cumulative(self):
        builder = PackedBatchBuilder()
        builder.add([101, 7, 102], [0, 0, 0])
        builder.add([101, 102], [0, 0])
        builder.add([101, 8, 9, 10, 102], [0, 0, 1, 1, 1])

        batch = builder.build()

        assert batch.cumulative_seq_lengths == [0, 3, 5, 10]
        assert len(batch) == 3

    def test_buffers_are_concatenated(self):
        builder = PackedBatchBuilder()
        builder.add([1, 2], [0, 1])
        builder.add([3], [0])

        batch = builder.build()

        assert batch.input_ids == [1, 2, 3]
        assert batch.token_type_ids == [0, 1, 0]

    def test_position_ids_restart_per_text(self):
        builder = PackedBatchBuilder()
        builder.add([1, 2, 3], [0, 0, 0])
        builder.add([4, 5], [0, 0])

        assert builder.build().position_ids == [0, 1, 2, 0, 1]

    def test_max_length_tracks_longest_text(self):
        builder = PackedBatchBuilder()
        builder.add([1, 2], [0, 0])
        builder.add([1, 2, 3, 4], [0, 0, 0, 0])
        builder.add([1], [0])

        assert builder.build().max_length == 4

    def test_pooled_output_requested_for_every_text(self):
        builder = PackedBatchBuilder()
        for _ in range(4):
            builder.add([1], [0])

        batch = builder.build()

        assert batch.pooled_indices == [0, 1, 2, 3]
        assert batch.raw_indices == []

    def test_span_returns_token_range(self):
        builder = PackedBatchBuilder()
        builder.add([1, 2, 3], [0, 0, 0])
        builder.add([4, 5], [0, 0])
        batch = builder.build()

        start, end = batch.span(1)

        assert (start, end) == (3, 5)
        assert batch.input_ids[start:end] == [4, 5]

    def test_empty_builder(self):
        batch = PackedBatchBuilder().build()

        assert isinstance(batch, PackedBatch)
        assert len(batch) == 0
        assert batch.cumulative_seq_lengths == [0]
        assert batch.max_length == 0
        assert batch.pooled_indices == []

    def test_empty_text_has_zero_width_span(self):
        builder = PackedBatchBuilder()
        builder.add([], [])
        builder.add([1], [0])

        batch = builder.build()

        assert batch.span(0) == (0, 0)
        assert batch.span(1) == (0, 1)
