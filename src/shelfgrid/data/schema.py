"""Column contracts for the item and relation-pair datasets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

import pandas as pd
from pandas._typing import DtypeArg


STRING = pd.StringDtype()
FLOAT64 = "float64"


@dataclass(frozen=True)
class DatasetSchema:
    """Required/optional columns of a dataset and how to normalise them.

    ``id_columns`` hold item identifiers; they are read as strings and have
    surrounding whitespace removed so ``" A"`` and ``"A"`` name the same item.
    """

    name: str
    required_columns: Sequence[str]
    optional_columns: Sequence[str] = ()
    dtypes: Mapping[str, DtypeArg] = field(default_factory=dict)
    id_columns: Sequence[str] = ()

    @property
    def expected_columns(self) -> tuple[str, ...]:
        return (*self.required_columns, *self.optional_columns)

    def missing_required(self, columns: Iterable[str]) -> list[str]:
        present = set(columns)
        return sorted(set(self.required_columns) - present)

    def read_dtypes(self) -> dict[str, DtypeArg]:
        """Dtypes handed to ``pandas.read_csv`` (ids always as strings)."""

        mapping = {column: dtype for column, dtype in self.dtypes.items() if column in self.expected_columns}
        mapping.update({column: STRING for column in self.id_columns})
        return mapping

    def payload_columns(self, columns: Iterable[str]) -> list[str]:
        """Columns carried through as opaque payload: everything not required."""

        return [column for column in columns if column not in self.required_columns]

    def normalise(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Coerce known columns to their dtypes and strip id whitespace."""

        present = {column: dtype for column, dtype in self.read_dtypes().items() if column in frame.columns}
        frame = frame.astype(present) if present else frame.copy()
        for column in self.id_columns:
            if column in frame.columns:
                frame[column] = frame[column].str.strip()
        return frame


ITEMS_SCHEMA = DatasetSchema(
    name="items",
    required_columns=("ItemId", "Price"),
    optional_columns=("Product", "PackSize", "Brand"),
    dtypes={
        "Price": FLOAT64,
        "Product": STRING,
        "PackSize": STRING,
        "Brand": STRING,
    },
    id_columns=("ItemId",),
)

PAIRS_SCHEMA = DatasetSchema(
    name="pairs",
    required_columns=("Left", "Right"),
    optional_columns=("Note",),
    dtypes={"Note": STRING},
    id_columns=("Left", "Right"),
)

__all__ = [
    "DatasetSchema",
    "ITEMS_SCHEMA",
    "PAIRS_SCHEMA",
]
