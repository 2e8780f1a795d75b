"""Utilities for loading item and relation-pair datasets."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from ..model import Item, RelationPair
from .schema import ITEMS_SCHEMA, PAIRS_SCHEMA, DatasetSchema

__all__ = [
    "MissingColumnsError",
    "items_from_frame",
    "load_items",
    "load_pairs",
    "pairs_from_frame",
]


class MissingColumnsError(ValueError):
    """Raised when a dataset is missing required columns."""

    def __init__(self, schema: DatasetSchema, missing: list[str]):
        message = (
            f"{schema.name.title()} data is missing required columns: {', '.join(missing)}. "
            f"Expected columns include: {', '.join(schema.required_columns)}."
        )
        super().__init__(message)
        self.schema = schema
        self.missing = missing


def load_items(path: str | Path) -> pd.DataFrame:
    """Load an items dataset from CSV or JSON and validate required columns."""

    return _load_and_validate(path, ITEMS_SCHEMA)


def load_pairs(path: str | Path) -> pd.DataFrame:
    """Load a relation-pair dataset from CSV or JSON and validate required columns."""

    return _load_and_validate(path, PAIRS_SCHEMA)


def items_from_frame(frame: pd.DataFrame) -> list[Item]:
    """Convert an items dataframe into :class:`~shelfgrid.model.Item` objects.

    Every column other than ``ItemId`` and ``Price`` becomes payload; null
    payload values are dropped. Rows without an id or price are skipped.
    """

    payload_columns = ITEMS_SCHEMA.payload_columns(frame.columns)
    items: list[Item] = []
    for record in frame.to_dict(orient="records"):
        item_id = record.get("ItemId")
        price = record.get("Price")
        if pd.isna(item_id) or pd.isna(price):
            continue
        payload = {
            column: _to_python(record[column])
            for column in payload_columns
            if not _is_null(record[column])
        }
        items.append(Item(item_id=str(item_id), price=float(price), payload=payload))
    return items


def pairs_from_frame(frame: pd.DataFrame) -> list[RelationPair]:
    """Convert a pairs dataframe into ordered ``(left, right)`` tuples."""

    pairs: list[RelationPair] = []
    for left, right in frame.loc[:, ["Left", "Right"]].itertuples(index=False, name=None):
        if pd.isna(left) or pd.isna(right):
            continue
        pairs.append((str(left), str(right)))
    return pairs


def _is_null(value: object) -> bool:
    return pd.api.types.is_scalar(value) and bool(pd.isna(value))


def _to_python(value: object) -> object:
    if isinstance(value, np.generic):
        return value.item()
    return value


def _load_and_validate(path_like: str | Path, schema: DatasetSchema) -> pd.DataFrame:
    path = Path(path_like)
    frame = _read_structured_file(path, schema)
    missing = schema.missing_required(frame.columns)
    if missing:
        raise MissingColumnsError(schema, missing)
    return schema.normalise(frame)


def _read_structured_file(path: Path, schema: DatasetSchema) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, dtype=schema.read_dtypes())
    if suffix in {".json", ".jsonl"}:
        return _read_json(path)
    raise ValueError(f"Unsupported file type '{suffix}' for {schema.name} data")


def _read_json(path: Path) -> pd.DataFrame:
    raw = path.read_text(encoding="utf-8").strip()
    if not raw:
        return pd.DataFrame()
    if raw[0] == "{":
        return pd.read_json(path, lines=True, dtype=False)
    return pd.read_json(path, dtype=False)
