"""Fixed LanceDB table schema: id, text, vector, metadata."""

from __future__ import annotations

import pyarrow as pa

ID_COLUMN = "id"
TEXT_COLUMN = "text"
VECTOR_COLUMN = "vector"
METADATA_COLUMN = "metadata"
DISTANCE_COLUMN = "_distance"


def table_schema(dimension: int) -> pa.Schema:
    """Return the four-column schema for vectors of *dimension* float32s."""
    if dimension <= 0:
        msg = f"Table dimension must be positive, got {dimension}"
        raise ValueError(msg)
    return pa.schema(
        [
            pa.field(ID_COLUMN, pa.string(), nullable=False),
            pa.field(TEXT_COLUMN, pa.string(), nullable=False),
            pa.field(VECTOR_COLUMN, pa.list_(pa.float32(), dimension), nullable=False),
            # JSON-encoded object
            pa.field(METADATA_COLUMN, pa.string(), nullable=True),
        ]
    )


def vector_dimension(schema: pa.Schema) -> int:
    """Return the fixed width of the vector column in *schema*."""
    vector_type = schema.field(VECTOR_COLUMN).type
    if not pa.types.is_fixed_size_list(vector_type):
        msg = f"Column '{VECTOR_COLUMN}' is not a fixed-size list: {vector_type}"
        raise TypeError(msg)
    return vector_type.list_size
