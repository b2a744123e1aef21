"""Result reconstruction — raw search rows to :class:`SearchResult`."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from lancekb.store.ingest import DESCRIPTION_KEY, NAME_KEY
from lancekb.store.types import SearchResult

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


def distance_to_score(distance: float) -> float:
    """Convert a cosine distance to a similarity score."""
    return 1.0 - float(distance)


def parse_metadata(raw: str | None) -> dict[str, Any]:
    """Decode a stored metadata string; anything but a JSON object gives ``{}``."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Unparsable metadata %r; using empty object", raw)
        return {}
    return value if isinstance(value, dict) else {}


def extract_document_fields(
    metadata: Mapping[str, Any],
) -> tuple[str, str | None, dict[str, Any]]:
    """Split *metadata* into ``(name, description, remaining)``.

    Both keys are removed from the remainder; only string values are promoted.
    """
    rest = dict(metadata)
    raw_name = rest.pop(NAME_KEY, None)
    raw_description = rest.pop(DESCRIPTION_KEY, None)
    name = raw_name if isinstance(raw_name, str) else ""
    description = raw_description if isinstance(raw_description, str) else None
    return name, description, rest


def reconstruct(
    record_id: str,
    text: str,
    metadata: str | None,
    distance: float,
) -> SearchResult:
    """Build a :class:`SearchResult` from one search row."""
    name, description, rest = extract_document_fields(parse_metadata(metadata))
    return SearchResult(
        id=record_id,
        name=name,
        content=text,
        score=distance_to_score(distance),
        metadata=rest,
        description=description,
    )
