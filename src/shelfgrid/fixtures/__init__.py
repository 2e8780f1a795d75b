"""Sample datasets bundled for demos, integration and regression tests.

Each fixture is a directory holding ``items.csv``, ``horizontal.csv`` and an
optional ``vertical.csv``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from ..data import items_from_frame, load_items, load_pairs, pairs_from_frame
from ..model import Item, RelationPair

_FIXTURES_ROOT = Path(__file__).resolve().parent


def available_fixtures() -> list[str]:
    """Return the names of the fixture scenarios that ship with the package."""

    return sorted(
        entry.name
        for entry in _FIXTURES_ROOT.iterdir()
        if entry.is_dir() and (entry / "items.csv").exists()
    )


def fixture_path(name: str, dataset: str) -> Path:
    """Return the absolute path to a fixture dataset (``.csv`` suffix optional)."""

    normalised = dataset if dataset.endswith(".csv") else f"{dataset}.csv"
    path = _FIXTURES_ROOT / name / normalised
    if not path.exists():
        available = ", ".join(available_fixtures())
        raise FileNotFoundError(
            f"Dataset '{dataset}' not found for fixture '{name}'. Available fixtures: {available}"
        )
    return path


def iter_fixture_datasets(name: str) -> Iterable[Path]:
    """Yield all CSV datasets available for ``name``."""

    directory = _FIXTURES_ROOT / name
    if not directory.is_dir():
        available = ", ".join(available_fixtures())
        raise FileNotFoundError(
            f"Fixture '{name}' not found. Available fixtures: {available}"
        )
    yield from sorted(directory.glob("*.csv"))


def load_fixture(name: str) -> tuple[list[Item], list[RelationPair], list[RelationPair]]:
    """Load ``(items, horizontal_pairs, vertical_pairs)`` for a bundled fixture."""

    items = items_from_frame(load_items(fixture_path(name, "items")))
    horizontal = pairs_from_frame(load_pairs(fixture_path(name, "horizontal")))
    vertical_path = _FIXTURES_ROOT / name / "vertical.csv"
    vertical = pairs_from_frame(load_pairs(vertical_path)) if vertical_path.exists() else []
    return items, horizontal, vertical


__all__ = [
    "available_fixtures",
    "fixture_path",
    "iter_fixture_datasets",
    "load_fixture",
]
