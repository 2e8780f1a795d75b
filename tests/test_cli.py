from __future__ import annotations

import json
import logging
from pathlib import Path

import pandas as pd
import pytest

from shelfgrid.cli.__main__ import build_parser, main
from shelfgrid.diagnostics import DIAGNOSTICS_BASENAME
from shelfgrid.explain.trace import TRACE_SCHEMA_VERSION
from shelfgrid.layout.pipeline import CONNECTOR_COLUMNS, PLACEMENT_COLUMNS


@pytest.fixture(autouse=True)
def _reset_shelfgrid_logger():
    yield
    logger = logging.getLogger("shelfgrid")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def _write_inputs(tmp_path: Path) -> tuple[Path, Path, Path]:
    items_path = tmp_path / "items.csv"
    horizontal_path = tmp_path / "horizontal.csv"
    vertical_path = tmp_path / "vertical.csv"

    pd.DataFrame(
        {
            "ItemId": ["A", "B", "C", "D", "E"],
            "Product": ["Milk 1gal", "Milk 1/2gal", "Milk qt", "Bread L", "Bread S"],
            "Price": [5.0, 3.0, 1.0, 4.0, 2.0],
        }
    ).to_csv(items_path, index=False)
    pd.DataFrame({"Left": ["C", "B", "E"], "Right": ["B", "A", "D"]}).to_csv(horizontal_path, index=False)
    pd.DataFrame({"Left": ["A"], "Right": ["D"]}).to_csv(vertical_path, index=False)
    return items_path, horizontal_path, vertical_path


def test_parser_displays_help(capsys: pytest.CaptureFixture[str]) -> None:
    parser = build_parser()
    args = parser.parse_args(["--version"])
    assert args.version is True

    with pytest.raises(SystemExit):
        parser.parse_args(["layout", "--help"])
    captured = capsys.readouterr()
    assert "--grouping" in captured.out
    assert "--diagnostics-dir" in captured.out


def test_version_flag_reports_package_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("shelfgrid ")


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    main([])

    assert "layout" in capsys.readouterr().out


def test_layout_from_bundled_fixture(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output = tmp_path / "layout.json"

    main(["layout", "--fixture", "grocery", "--output", str(output)])

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["super_clusters"] == [[0, 1, 3, 2]]
    assert [cluster["hue"] for cluster in payload["clusters"]] == [26, 39, 65, 91]
    assert len(payload["connectors"]) == 3
    assert "Wrote layout with 4 cluster(s) in 1 super-cluster(s)" in capsys.readouterr().out


def test_layout_writes_every_requested_artifact(tmp_path: Path) -> None:
    items_path, horizontal_path, vertical_path = _write_inputs(tmp_path)
    output = tmp_path / "out" / "layout.json"
    placements = tmp_path / "out" / "placements.csv"
    connectors = tmp_path / "out" / "connectors.jsonl"
    trace = tmp_path / "out" / "trace.jsonl"
    diagnostics_dir = tmp_path / "diagnostics"

    main(
        [
            "layout",
            "--items",
            str(items_path),
            "--horizontal",
            str(horizontal_path),
            "--vertical",
            str(vertical_path),
            "--output",
            str(output),
            "--grouping",
            "positional",
            "--placements-out",
            str(placements),
            "--connectors-out",
            str(connectors),
            "--trace-out",
            str(trace),
            "--diagnostics-dir",
            str(diagnostics_dir),
        ]
    )

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["metadata"]["parameters"]["grouping"] == "positional"
    assert payload["super_clusters"] == [[0, 1]]
    assert payload["clusters"][0]["items"][0]["payload"] == {"Product": "Milk 1gal"}

    frame = pd.read_csv(placements)
    assert list(frame.columns) == PLACEMENT_COLUMNS
    assert frame["item_id"].tolist() == ["A", "B", "C", "D", "E"]

    connector_frame = pd.read_json(connectors, lines=True)
    assert list(connector_frame.columns) == CONNECTOR_COLUMNS
    assert len(connector_frame) == 1

    records = [json.loads(line) for line in trace.read_text(encoding="utf-8").splitlines()]
    assert [record["cluster_index"] for record in records] == [0, 1]
    assert all(record["metadata.schema_version"] == TRACE_SCHEMA_VERSION for record in records)

    assert (diagnostics_dir / f"{DIAGNOSTICS_BASENAME}.json").exists()
    assert (diagnostics_dir / f"{DIAGNOSTICS_BASENAME}.html").exists()
    assert (diagnostics_dir / f"{DIAGNOSTICS_BASENAME}-placements.csv").exists()
    assert (diagnostics_dir / f"{DIAGNOSTICS_BASENAME}-connectors.csv").exists()


def test_layout_trace_can_be_written_as_csv(tmp_path: Path) -> None:
    trace = tmp_path / "trace.csv"

    main(
        [
            "layout",
            "--fixture",
            "produce_chain",
            "--output",
            str(tmp_path / "layout.json"),
            "--trace-out",
            str(trace),
            "--trace-format",
            "csv",
        ]
    )

    frame = pd.read_csv(trace)
    assert len(frame) == 4
    assert "alignment.offset" in frame.columns


def test_layout_requires_inputs(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["layout", "--output", str(tmp_path / "layout.json")])
    assert "requires --items" in str(excinfo.value)


def test_layout_rejects_fixture_combined_with_paths(tmp_path: Path) -> None:
    items_path, _, _ = _write_inputs(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main(
            [
                "layout",
                "--fixture",
                "grocery",
                "--items",
                str(items_path),
                "--output",
                str(tmp_path / "layout.json"),
            ]
        )
    assert "cannot be combined" in str(excinfo.value)


def test_layout_rejects_invalid_parameters(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    items_path, horizontal_path, _ = _write_inputs(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main(
            [
                "layout",
                "--items",
                str(items_path),
                "--horizontal",
                str(horizontal_path),
                "--output",
                str(tmp_path / "layout.json"),
                "--card-gap",
                "-1",
            ]
        )
    assert "card_gap" in str(excinfo.value)
    assert capsys.readouterr().err.startswith("Error:")


def test_layout_reports_missing_columns(tmp_path: Path) -> None:
    _, horizontal_path, _ = _write_inputs(tmp_path)
    bad_items = tmp_path / "bad_items.csv"
    pd.DataFrame({"ItemId": ["A"]}).to_csv(bad_items, index=False)

    with pytest.raises(SystemExit) as excinfo:
        main(
            [
                "layout",
                "--items",
                str(bad_items),
                "--horizontal",
                str(horizontal_path),
                "--output",
                str(tmp_path / "layout.json"),
            ]
        )
    assert "missing required columns" in str(excinfo.value)


def test_layout_reports_missing_files(tmp_path: Path) -> None:
    _, horizontal_path, _ = _write_inputs(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main(
            [
                "layout",
                "--items",
                str(tmp_path / "nope.csv"),
                "--horizontal",
                str(horizontal_path),
                "--output",
                str(tmp_path / "layout.json"),
            ]
        )
    assert "was not found" in str(excinfo.value)


def test_layout_log_file_captures_summary(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"

    main(
        [
            "layout",
            "--fixture",
            "grocery",
            "--output",
            str(tmp_path / "layout.json"),
            "--log-level",
            "info",
            "--log-file",
            str(log_file),
        ]
    )
    for handler in logging.getLogger("shelfgrid").handlers:
        handler.flush()

    assert "Laid out 9 item(s) in 4 cluster(s)" in log_file.read_text(encoding="utf-8")


def test_fixtures_command_lists_bundled_fixtures(capsys: pytest.CaptureFixture[str]) -> None:
    main(["fixtures"])

    assert capsys.readouterr().out.split() == ["grocery", "produce_chain"]


def test_fixtures_command_shows_dataset_paths(capsys: pytest.CaptureFixture[str]) -> None:
    main(["fixtures", "--name", "produce_chain"])

    lines = capsys.readouterr().out.splitlines()
    assert [Path(line).name for line in lines] == ["horizontal.csv", "items.csv", "vertical.csv"]

    with pytest.raises(SystemExit) as excinfo:
        main(["fixtures", "--name", "bakery"])
    assert "not found" in str(excinfo.value)
