"""KnowledgeBaseConfig — settings for the store and the embedding model."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_DB_PATH = "./lancedb_data"
DEFAULT_TABLE_NAME = "knowledge_base"
DEFAULT_SEARCH_LIMIT = 5


@dataclass(frozen=True)
class KnowledgeBaseConfig:
    """Configuration for a :class:`~lancekb.KnowledgeBase`.

    Attributes:
        db_path: LanceDB directory (or URI).
        embedding_endpoint: Base URL of an OpenAI-compatible embeddings API.
            When ``None`` the model is loaded locally.
        embedding_model: Model identifier; ``None`` selects the default.
        api_key: Optional bearer token for the remote endpoint.
        default_table: Table used when a request omits ``table_name``.
        default_limit: Result count used when a search omits ``limit``.
    """

    db_path: str = DEFAULT_DB_PATH
    embedding_endpoint: str | None = None
    embedding_model: str | None = None
    api_key: str | None = field(default=None, repr=False)
    default_table: str = DEFAULT_TABLE_NAME
    default_limit: int = DEFAULT_SEARCH_LIMIT

    @property
    def is_remote(self) -> bool:
        """Whether embeddings are served by a remote endpoint."""
        return self.embedding_endpoint is not None

    @classmethod
    def from_env(cls, **overrides: object) -> KnowledgeBaseConfig:
        """Build a config from ``LANCEKB_*`` environment variables.

        The API key is read from ``OPENAI_API_KEY``.  Keyword *overrides*
        take precedence over the environment.
        """
        values: dict[str, object] = {
            "db_path": os.environ.get("LANCEKB_DB_PATH", DEFAULT_DB_PATH),
            "embedding_endpoint": os.environ.get("LANCEKB_EMBEDDING_ENDPOINT") or None,
            "embedding_model": os.environ.get("LANCEKB_EMBEDDING_MODEL") or None,
            "api_key": os.environ.get("OPENAI_API_KEY") or None,
        }
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
