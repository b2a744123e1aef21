"""Custom exception hierarchy for lancekb."""


class LanceKBError(Exception):
    """Base exception for all lancekb errors."""


class EmbeddingError(LanceKBError):
    """Raised when a batch of texts could not be embedded."""


class EmbeddingModelLoadError(LanceKBError):
    """Raised when an embedding model cannot be constructed (download, tokenizer, backend)."""


class SchemaError(LanceKBError):
    """Raised when data does not fit a table's fixed schema."""


class DimensionMismatchError(SchemaError):
    """Raised when a vector's length differs from the table's declared dimension."""

    def __init__(self, table_name: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Vector dimension mismatch for table '{table_name}': "
            f"expected {expected}, got {actual}"
        )
        self.table_name = table_name
        self.expected = expected
        self.actual = actual


class TableNotFoundError(LanceKBError):
    """Raised when an operation targets a table that does not exist."""

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Table '{table_name}' was not found")
        self.table_name = table_name
