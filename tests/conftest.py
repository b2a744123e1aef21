"""Shared fixtures for lancekb tests."""

from __future__ import annotations

import hashlib
import math
from typing import TYPE_CHECKING

import pytest

from lancekb.store import VectorStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


def hash_vector(text: str, dim: int = 32) -> list[float]:
    """Deterministic unit vector from text hash."""
    raw = [float(b) + 1.0 for b in hashlib.shake_256(text.encode()).digest(dim)]
    norm = math.sqrt(sum(x * x for x in raw))
    return [x / norm for x in raw]


class FakeModel:
    """Deterministic async embedding model for tests."""

    def __init__(self, dim: int = 32) -> None:
        self.dim = dim
        self.calls: list[list[str]] = []
        self.closed = False

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        self.calls.append(list(texts))
        return [hash_vector(t, self.dim) for t in texts]

    @property
    def model_name(self) -> str:
        return f"fake-{self.dim}"

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def model() -> FakeModel:
    return FakeModel()


@pytest.fixture
async def store(tmp_path: Path) -> AsyncIterator[VectorStore]:
    """VectorStore connected to a fresh LanceDB directory."""
    s = await VectorStore.open(str(tmp_path / "lancedb"))
    yield s
    s.close()


@pytest.fixture
def make_model():
    """Factory for fake models of a chosen dimension."""
    return FakeModel
