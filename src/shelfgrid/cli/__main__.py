"""Command-line entry point for shelfgrid."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Callable, Iterable, Sequence

import pandas as pd

from shelfgrid.cli.schema_validation import SchemaValidationError, SchemaValidator
from shelfgrid.data import (
    MissingColumnsError,
    items_from_frame,
    load_items,
    load_pairs,
    pairs_from_frame,
)
from shelfgrid.diagnostics import (
    build_diagnostics,
    render_html,
    write_html,
    write_json,
    write_table,
)
from shelfgrid.fixtures import available_fixtures, fixture_path, iter_fixture_datasets
from shelfgrid.layout import (
    LayoutConfigurationError,
    LayoutParameters,
    LayoutResult,
    compute_layout,
)
from shelfgrid.logging_config import setup_logging


logger = logging.getLogger("shelfgrid.cli")


class ShelfgridCliError(RuntimeError):
    """Raised when CLI arguments cannot be satisfied."""


_SCHEMA_VALIDATOR = SchemaValidator()
_DEFAULTS = LayoutParameters()


def _get_package_version() -> str:
    try:
        return metadata.version("shelfgrid")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shelfgrid",
        description="Cluster priced items by their relations and compute a stacked grid layout",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    version = _get_package_version()
    parser.add_argument(
        "--version",
        action="store_true",
        help=f"Show the installed shelfgrid version ({version})",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command")

    layout = subparsers.add_parser(
        "layout",
        help="Compute clusters, super-clusters, offsets and connectors",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    layout.add_argument(
        "--fixture",
        choices=available_fixtures(),
        help="Use a bundled fixture instead of --items/--horizontal/--vertical",
    )
    layout.add_argument("--items", help="Path to the items dataset (CSV or JSON)")
    layout.add_argument("--horizontal", help="Path to the horizontal pairs dataset (CSV or JSON)")
    layout.add_argument("--vertical", help="Optional path to the vertical pairs dataset (CSV or JSON)")
    layout.add_argument(
        "--output",
        required=True,
        help="Destination for the JSON layout payload",
    )
    layout.add_argument(
        "--grouping",
        choices=["chain", "positional"],
        default=_DEFAULTS.grouping,
        help="Ordering of clusters inside each super-cluster",
    )
    layout.add_argument(
        "--unpaired",
        dest="unpaired_items",
        choices=["exclude", "singleton"],
        default=_DEFAULTS.unpaired_items,
        help="Treatment of items that appear in no horizontal pair",
    )
    layout.add_argument(
        "--card-sizing",
        choices=["fixed", "fibonacci"],
        default=_DEFAULTS.card_sizing,
        help="Slot width policy used when aligning clusters",
    )
    layout.add_argument("--card-width", type=float, default=_DEFAULTS.card_width, help="Card width in pixels")
    layout.add_argument("--card-gap", type=float, default=_DEFAULTS.card_gap, help="Gap between cards in pixels")
    layout.add_argument(
        "--connector-width",
        type=float,
        default=_DEFAULTS.connector_width,
        help="Width of the connector drawn between neighbouring cards",
    )
    layout.add_argument(
        "--connector-spacing",
        type=float,
        default=_DEFAULTS.connector_spacing,
        help="Nudge applied per extra connector landing on the same cluster",
    )
    layout.add_argument(
        "--placements-out",
        help="Optional per-item placement table (CSV, or JSON lines for .json/.jsonl)",
    )
    layout.add_argument(
        "--connectors-out",
        help="Optional connector table (CSV, or JSON lines for .json/.jsonl)",
    )
    layout.add_argument(
        "--trace-out",
        help="Optional per-cluster trace file",
    )
    layout.add_argument(
        "--trace-format",
        choices=["jsonl", "csv"],
        default="jsonl",
        help="Format used when writing --trace-out",
    )
    layout.add_argument(
        "--diagnostics-dir",
        help="Directory receiving versioned diagnostics JSON/HTML/CSV artifacts",
    )
    layout.add_argument(
        "--log-level",
        default="warning",
        help="Logging level for the shelfgrid logger (debug, info, warning, error)",
    )
    layout.add_argument(
        "--log-file",
        help="Optional file that receives a copy of the log output",
    )
    layout.set_defaults(handler=_handle_layout)

    fixtures = subparsers.add_parser(
        "fixtures",
        help="List bundled fixture datasets",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    fixtures.add_argument("--name", help="Show the dataset paths of one fixture")
    fixtures.set_defaults(handler=_handle_fixtures)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if getattr(args, "version", False):
        print(f"shelfgrid {_get_package_version()}")
        raise SystemExit(0)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return

    try:
        setup_logging(getattr(args, "log_level", "warning"), getattr(args, "log_file", None))
    except ValueError as exc:
        parser.error(str(exc))

    try:
        handler(args)
    except ShelfgridCliError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(f"Error: {exc}") from exc


def _handle_layout(args: argparse.Namespace) -> None:
    params = _build_parameters(args)
    items_frame, horizontal_frame, vertical_frame = _resolve_inputs(args)

    items = items_from_frame(items_frame)
    horizontal = pairs_from_frame(horizontal_frame)
    vertical = pairs_from_frame(vertical_frame) if vertical_frame is not None else []

    result = compute_layout(items, horizontal, vertical, params)
    payload = result.to_payload()
    _validate_layout_output(payload)
    _write_json(payload, Path(args.output))

    if args.placements_out:
        _write_table(result.to_frame(), Path(args.placements_out))
    if args.connectors_out:
        _write_table(result.connectors_frame(), Path(args.connectors_out))
    if args.trace_out:
        _write_trace(result.to_trace(), Path(args.trace_out), format_hint=args.trace_format)
    if args.diagnostics_dir:
        _emit_diagnostics(result, Path(args.diagnostics_dir))

    print(
        f"Wrote layout with {len(result.clusters)} cluster(s) in "
        f"{len(result.super_clusters)} super-cluster(s) to {args.output}"
    )


def _handle_fixtures(args: argparse.Namespace) -> None:
    if args.name is None:
        for name in available_fixtures():
            print(name)
        return
    try:
        paths = list(iter_fixture_datasets(args.name))
    except FileNotFoundError as exc:
        raise ShelfgridCliError(str(exc)) from exc
    for path in paths:
        print(path)


def _build_parameters(args: argparse.Namespace) -> LayoutParameters:
    try:
        return LayoutParameters(
            card_width=args.card_width,
            card_gap=args.card_gap,
            connector_width=args.connector_width,
            connector_spacing=args.connector_spacing,
            card_sizing=args.card_sizing,
            grouping=args.grouping,
            unpaired_items=args.unpaired_items,
        )
    except LayoutConfigurationError as exc:
        raise ShelfgridCliError(str(exc)) from exc


def _resolve_inputs(
    args: argparse.Namespace,
) -> tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame | None]:
    if args.fixture:
        if args.items or args.horizontal or args.vertical:
            raise ShelfgridCliError("--fixture cannot be combined with --items/--horizontal/--vertical")
        items_location = str(fixture_path(args.fixture, "items"))
        horizontal_location = str(fixture_path(args.fixture, "horizontal"))
        try:
            vertical_location: str | None = str(fixture_path(args.fixture, "vertical"))
        except FileNotFoundError:
            vertical_location = None
    else:
        if not args.items or not args.horizontal:
            raise ShelfgridCliError("layout requires --items and --horizontal (or --fixture)")
        items_location = args.items
        horizontal_location = args.horizontal
        vertical_location = args.vertical

    items = _load_dataset(load_items, items_location, "items")
    horizontal = _load_dataset(load_pairs, horizontal_location, "horizontal pairs")
    vertical = None
    if vertical_location:
        vertical = _load_dataset(load_pairs, vertical_location, "vertical pairs")
    return items, horizontal, vertical


def _load_dataset(loader: Callable[[str], pd.DataFrame], location: str, label: str) -> pd.DataFrame:
    try:
        return loader(location)
    except FileNotFoundError as exc:
        raise ShelfgridCliError(f"{label.capitalize()} file '{location}' was not found") from exc
    except MissingColumnsError as exc:
        raise ShelfgridCliError(str(exc)) from exc
    except ValueError as exc:
        raise ShelfgridCliError(str(exc)) from exc


def _validate_layout_output(payload: dict[str, object]) -> None:
    try:
        _SCHEMA_VALIDATOR.validate("layout", payload)
    except SchemaValidationError as exc:
        raise ShelfgridCliError(f"Layout output failed schema validation: {exc}") from exc


def _emit_diagnostics(result: LayoutResult, directory: Path) -> None:
    directory = directory.expanduser().resolve()
    payload = build_diagnostics(result)
    try:
        json_path = write_json(payload, directory)
        write_html(render_html(payload), directory)
        write_table(result.to_frame(), directory, table="placements")
        write_table(result.connectors_frame(), directory, table="connectors")
    except (OSError, ValueError) as exc:
        raise ShelfgridCliError(f"Failed to write diagnostics to '{directory}': {exc}") from exc
    logger.info("Wrote diagnostics to %s", json_path)


def _write_table(frame: pd.DataFrame, path: Path) -> None:
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if path.suffix.lower() in {".json", ".jsonl", ".ndjson"}:
            frame.to_json(path, orient="records", lines=True)
        else:
            frame.to_csv(path, index=False)
    except OSError as exc:  # pragma: no cover - unlikely in tests
        raise ShelfgridCliError(f"Failed to write output to '{path}': {exc}") from exc


def _write_json(data: dict[str, object], path: Path) -> None:
    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except OSError as exc:  # pragma: no cover - unlikely in tests
        raise ShelfgridCliError(f"Failed to write JSON output to '{path}': {exc}") from exc


def _write_trace(
    records: Iterable[dict[str, object]],
    path: Path,
    *,
    format_hint: str,
) -> None:
    materialised = list(records)
    if not materialised:
        return

    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        if format_hint == "csv":
            pd.DataFrame.from_records(materialised).to_csv(path, index=False)
        else:
            with path.open("w", encoding="utf-8") as handle:
                for record in materialised:
                    handle.write(json.dumps(record, sort_keys=True) + "\n")
    except OSError as exc:  # pragma: no cover - unlikely in tests
        raise ShelfgridCliError(f"Failed to write trace output to '{path}': {exc}") from exc


if __name__ == "__main__":
    main()
