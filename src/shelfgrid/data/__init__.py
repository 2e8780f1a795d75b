"""Data loading utilities for shelfgrid inputs."""

from .loaders import (
    MissingColumnsError,
    items_from_frame,
    load_items,
    load_pairs,
    pairs_from_frame,
)
from .schema import (
    ITEMS_SCHEMA,
    PAIRS_SCHEMA,
    DatasetSchema,
)

__all__ = [
    "MissingColumnsError",
    "items_from_frame",
    "load_items",
    "load_pairs",
    "pairs_from_frame",
    "ITEMS_SCHEMA",
    "PAIRS_SCHEMA",
    "DatasetSchema",
]
