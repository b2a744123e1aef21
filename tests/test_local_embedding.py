"""Tests for LocalEmbedding — tokenizer + locked inference backend."""

from __future__ import annotations

import asyncio
import threading
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from lancekb.embeddings.batch import PooledEmbedding, TokenEmbeddings
from lancekb.embeddings.local import DEFAULT_MODEL_ID, LocalEmbedding
from lancekb.embeddings.protocols import EmbeddingModel
from lancekb.exceptions import EmbeddingError

# ------------------------------------------------------------------
# Fakes
# ------------------------------------------------------------------


class FakeTokenizer:
    """Maps each character to a token id; type ids are all zero."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def encode_batch(self, texts, add_special_tokens=True):
        self.calls.append(list(texts))
        encodings = []
        for text in texts:
            ids = [ord(c) for c in text]
            if add_special_tokens:
                ids = [1, *ids, 2]
            encodings.append(SimpleNamespace(ids=ids, type_ids=[0] * len(ids)))
        return encodings


class FakeBackend:
    """Returns pooled vectors ``[index, span_length]`` for each text."""

    def __init__(self) -> None:
        self.batches = []

    def embed(self, batch):
        self.batches.append(batch)
        out = {}
        for idx in batch.pooled_indices:
            start, end = batch.span(idx)
            out[idx] = PooledEmbedding(values=[float(idx), float(end - start)])
        return out


@pytest.fixture
def tokenizer() -> FakeTokenizer:
    return FakeTokenizer()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def model(tokenizer: FakeTokenizer, backend: FakeBackend) -> LocalEmbedding:
    return LocalEmbedding(tokenizer, backend, model_name="fake-local")


# ==================================================================
# embed
# ==================================================================


class TestEmbed:
    async def test_order_and_length_preserved(self, model: LocalEmbedding):
        result = await model.embed(["a", "bcd", "ef"])

        assert result == [[0.0, 3.0], [1.0, 5.0], [2.0, 4.0]]

    async def test_every_vector_has_same_dimension(self, model: LocalEmbedding):
        result = await model.embed(["x", "yy", "zzz", "wwww"])

        assert len(result) == 4
        assert {len(v) for v in result} == {2}

    async def test_empty_input_skips_backend(self, model, tokenizer, backend):
        assert await model.embed([]) == []
        assert tokenizer.calls == []
        assert backend.batches == []

    async def test_single_tokenizer_call_per_batch(self, model, tokenizer):
        await model.embed(["a", "b", "c"])

        assert tokenizer.calls == [["a", "b", "c"]]

    async def test_backend_receives_packed_batch(self, model, backend):
        await model.embed(["ab", "c"])

        batch = backend.batches[0]
        assert batch.input_ids == [1, ord("a"), ord("b"), 2, 1, ord("c"), 2]
        assert batch.cumulative_seq_lengths == [0, 4, 7]
        assert batch.position_ids == [0, 1, 2, 3, 0, 1, 2]
        assert batch.max_length == 4
        assert batch.pooled_indices == [0, 1]
        assert batch.raw_indices == []

    async def test_backend_map_order_is_irrelevant(self, tokenizer):
        backend = MagicMock()
        backend.embed.return_value = {
            2: PooledEmbedding([2.0]),
            0: PooledEmbedding([0.0]),
            1: PooledEmbedding([1.0]),
        }
        model = LocalEmbedding(tokenizer, backend)

        assert await model.embed(["a", "b", "c"]) == [[0.0], [1.0], [2.0]]

    async def test_missing_index_leaves_empty_slot(self, tokenizer):
        backend = MagicMock()
        backend.embed.return_value = {0: PooledEmbedding([0.5, 0.5])}
        model = LocalEmbedding(tokenizer, backend)

        assert await model.embed(["a", "b"]) == [[0.5, 0.5], []]

    async def test_non_pooled_entries_ignored(self, tokenizer):
        backend = MagicMock()
        backend.embed.return_value = {
            0: TokenEmbeddings([[1.0], [2.0]]),
            1: PooledEmbedding([3.0]),
        }
        model = LocalEmbedding(tokenizer, backend)

        assert await model.embed(["a", "b"]) == [[], [3.0]]

    async def test_out_of_range_index_ignored(self, tokenizer):
        backend = MagicMock()
        backend.embed.return_value = {0: PooledEmbedding([1.0]), 5: PooledEmbedding([9.0])}
        model = LocalEmbedding(tokenizer, backend)

        assert await model.embed(["a"]) == [[1.0]]

    async def test_tokenization_failure_raises(self, backend):
        tokenizer = MagicMock()
        tokenizer.encode_batch.side_effect = RuntimeError("bad input")
        model = LocalEmbedding(tokenizer, backend)

        with pytest.raises(EmbeddingError, match="Tokenization failed"):
            await model.embed(["a"])
        assert backend.batches == []

    async def test_embed_after_close_raises(self, model: LocalEmbedding):
        await model.close()

        with pytest.raises(EmbeddingError, match="closed"):
            await model.embed(["a"])

    async def test_close_waits_for_in_flight_batch(self, tokenizer):
        entered = threading.Event()
        release = threading.Event()

        class BlockingBackend(FakeBackend):
            def embed(self, batch):
                entered.set()
                release.wait(timeout=5)
                return super().embed(batch)

        model = LocalEmbedding(tokenizer, BlockingBackend(), model_name="fake-local")
        embed_task = asyncio.create_task(model.embed(["ab"]))
        assert await asyncio.to_thread(entered.wait, 5)

        close_task = asyncio.create_task(model.close())
        await asyncio.sleep(0.05)
        assert not close_task.done()

        release.set()
        assert await embed_task == [[0.0, 4.0]]
        await close_task
        with pytest.raises(EmbeddingError, match="closed"):
            await model.embed(["a"])

    def test_embed_sync(self, model: LocalEmbedding):
        assert model.embed_sync(["ab"]) == [[0.0, 4.0]]


# ==================================================================
# Properties / protocol
# ==================================================================


class TestProperties:
    def test_model_name(self, model: LocalEmbedding):
        assert model.model_name == "fake-local"

    def test_default_model_name(self, tokenizer, backend):
        assert LocalEmbedding(tokenizer, backend).model_name == DEFAULT_MODEL_ID

    def test_isinstance_embedding_model(self, model: LocalEmbedding):
        assert isinstance(model, EmbeddingModel)


# ==================================================================
# from_pretrained
# ==================================================================


class TestFromPretrained:
    def test_downloads_files_and_disables_padding(self, tmp_path):
        pytest.importorskip("tokenizers")
        pytest.importorskip("huggingface_hub")

        weights = tmp_path / "model.safetensors"

        def fake_download(repo_id, filename, cache_dir=None):
            return str(tmp_path / filename)

        fake_tokenizer = MagicMock()
        fake_backend = MagicMock()
        with (
            patch("lancekb.embeddings.local.hf_hub_download", side_effect=fake_download) as dl,
            patch("lancekb.embeddings.local.Tokenizer") as tok_cls,
            patch(
                "lancekb.embeddings.backend.TransformerBackend.from_pretrained",
                return_value=fake_backend,
            ) as backend_factory,
        ):
            tok_cls.from_file.return_value = fake_tokenizer
            model = LocalEmbedding.from_pretrained("org/model")

        filenames = [c.args[1] for c in dl.call_args_list]
        assert filenames == ["model.safetensors", "config.json", "tokenizer.json"]
        assert all(c.args[0] == "org/model" for c in dl.call_args_list)
        tok_cls.from_file.assert_called_once_with(str(tmp_path / "tokenizer.json"))
        fake_tokenizer.no_padding.assert_called_once()
        backend_factory.assert_called_once_with(weights.parent)
        assert model.model_name == "org/model"
