"""Utility to regenerate the bundled fixture datasets."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import pandas as pd


@dataclass(frozen=True)
class FixtureDefinition:
    """Container describing the CSV payloads for one fixture scenario."""

    name: str
    items: Iterable[dict[str, object]]
    horizontal: Sequence[tuple[str, str, str]]
    vertical: Sequence[tuple[str, str, str]] | None = None


def _item(item_id: str, product: str, price: float, pack_size: str, brand: str) -> dict[str, object]:
    return {"ItemId": item_id, "Product": product, "Price": price, "PackSize": pack_size, "Brand": brand}


_FIXTURES: tuple[FixtureDefinition, ...] = (
    FixtureDefinition(
        name="grocery",
        items=[
            _item("A", "Organic Milk", 4.99, "1 gallon", "Happy Farms"),
            _item("B", "Milk Half Gallon", 2.79, "0.5 gallon", "Happy Farms"),
            _item("C", "Milk Quart", 1.49, "32 oz", "Happy Farms"),
            _item("D", "Whole Grain Bread", 3.49, "24 oz", "Baker's Choice"),
            _item("E", "Sandwich Bread", 2.29, "16 oz", "Baker's Choice"),
            _item("F", "Orange Juice Large", 5.99, "64 oz", "Citrus Grove"),
            _item("G", "Orange Juice Small", 3.49, "32 oz", "Citrus Grove"),
            _item("H", "Cereal Family Size", 6.49, "20 oz", "Morning Crunch"),
            _item("I", "Cereal Regular", 4.29, "12 oz", "Morning Crunch"),
        ],
        horizontal=(
            ("C", "B", "Milk progression by size"),
            ("B", "A", "Milk progression by size"),
            ("E", "D", "Bread progression"),
            ("G", "F", "OJ progression"),
            ("I", "H", "Cereal progression"),
        ),
        vertical=(
            ("A", "D", "Milk to Bread"),
            ("D", "F", "Bread to OJ"),
            ("F", "H", "OJ to Cereal"),
        ),
    ),
    FixtureDefinition(
        name="produce_chain",
        items=[
            _item("P1", "Apples Bulk", 8.5, "5 lb", "Orchard Row"),
            _item("P2", "Apples Bag", 4.25, "2 lb", "Orchard Row"),
            _item("P3", "Apple Single", 0.99, "each", "Orchard Row"),
            _item("Q1", "Pears Bulk", 7.75, "4 lb", "Orchard Row"),
            _item("Q2", "Pear Single", 1.1, "each", "Orchard Row"),
            _item("R1", "Plums Tray", 6.0, "2 lb", "Stone Fruit Co"),
            _item("R2", "Plum Single", 0.85, "each", "Stone Fruit Co"),
            _item("S1", "Lemons Net", 3.5, "2 lb", "Citrus Grove"),
            _item("S2", "Lemon Single", 0.6, "each", "Citrus Grove"),
            _item("T1", "Gift Basket", 24.0, "1 basket", "Orchard Row"),
        ],
        horizontal=(
            ("P3", "P2", "Apple sizes"),
            ("P2", "P1", "Apple sizes"),
            ("Q2", "Q1", "Pear sizes"),
            ("R2", "R1", "Plum sizes"),
            ("S2", "S1", "Lemon sizes"),
            ("X9", "P1", "Discontinued listing"),
        ),
        vertical=(
            ("P2", "Q1", "Apples to pears"),
            ("P2", "Q1", "Duplicate declaration"),
            ("Q2", "R1", "Pears to plums"),
            ("P3", "R2", "Apples to plums"),
            ("S1", "Z0", "Unknown item"),
        ),
    ),
)


def _pairs_frame(pairs: Sequence[tuple[str, str, str]]) -> pd.DataFrame:
    return pd.DataFrame.from_records(list(pairs), columns=["Left", "Right", "Note"])


def _write_frame(frame: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)


def fixture_definitions() -> tuple[FixtureDefinition, ...]:
    return _FIXTURES


def regenerate(root: str | Path | None = None) -> list[Path]:
    """Regenerate all fixture CSVs under ``root`` (defaults to package data)."""

    base = Path(root) if root is not None else Path(__file__).resolve().parent
    written: list[Path] = []
    for fixture in _FIXTURES:
        target = base / fixture.name
        datasets = {
            "items.csv": pd.DataFrame.from_records(list(fixture.items)),
            "horizontal.csv": _pairs_frame(fixture.horizontal),
        }
        if fixture.vertical is not None:
            datasets["vertical.csv"] = _pairs_frame(fixture.vertical)

        for filename, frame in datasets.items():
            _write_frame(frame, target / filename)
            written.append(target / filename)
    return written


if __name__ == "__main__":  # pragma: no cover - manual utility
    regenerate()
