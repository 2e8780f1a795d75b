from __future__ import annotations

import pytest

from shelfgrid.cli.schema_validation import (
    SCHEMA_VERSION,
    SchemaValidationError,
    SchemaValidator,
    schema_directory,
)
from shelfgrid.fixtures import load_fixture
from shelfgrid.layout import compute_layout


@pytest.fixture
def payload() -> dict[str, object]:
    items, horizontal, vertical = load_fixture("produce_chain")
    return compute_layout(items, horizontal, vertical).to_payload()


def test_schema_directory_ships_with_package() -> None:
    directory = schema_directory(SCHEMA_VERSION)

    assert (directory / "layout.schema.json").exists()


def test_layout_payload_validates(payload) -> None:
    SchemaValidator().validate("layout", payload)


def test_invalid_hue_is_reported_with_path(payload) -> None:
    payload["clusters"][1]["hue"] = 400

    with pytest.raises(SchemaValidationError) as excinfo:
        SchemaValidator().validate("layout", payload)

    assert excinfo.value.schema == "layout"
    assert excinfo.value.path == "clusters.1.hue"


def test_unknown_schema_name_is_rejected(payload) -> None:
    with pytest.raises(ValueError, match="Unknown schema type"):
        SchemaValidator().validate("trace", payload)
