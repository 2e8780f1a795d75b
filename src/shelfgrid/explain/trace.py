"""Stable input hashing and per-cluster trace records for layout runs."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
import hashlib
import json
from typing import Any, Mapping


def _normalise_for_hash(value: Any) -> Any:
    """Return a JSON-serialisable representation of ``value``.

    Sequence order is preserved because pair order drives tie-breaks; only
    mapping keys and sets are sorted.
    """

    if isinstance(value, Mapping):
        return {str(key): _normalise_for_hash(sub_value) for key, sub_value in sorted(value.items(), key=lambda kv: str(kv[0]))}

    if isinstance(value, (list, tuple)):
        return [_normalise_for_hash(item) for item in value]

    if isinstance(value, (set, frozenset)):
        return sorted((_normalise_for_hash(item) for item in value), key=repr)

    if is_dataclass(value) and not isinstance(value, type):
        return {
            "__type__": type(value).__name__,
            **{entry.name: _normalise_for_hash(getattr(value, entry.name)) for entry in fields(value)},
        }

    if hasattr(value, "tolist") and callable(getattr(value, "tolist")):
        return value.tolist()

    if isinstance(value, (str, int, float, bool)) or value is None:
        return value

    return repr(value)


def hash_payload(payload: Any) -> str:
    """Return a stable SHA-256 hash for ``payload``.

    Dataclasses (items, parameters), tuples of pairs and ``numpy`` arrays are
    normalised first so equal inputs hash equally across processes.
    """

    normalised = _normalise_for_hash(payload)
    encoded = json.dumps(normalised, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


TRACE_SCHEMA_VERSION = "v1"


@dataclass(slots=True)
class TraceRecord:
    """Structured trace describing how one cluster was placed."""

    cluster_index: int
    stage: str
    metadata: dict[str, Any] = field(default_factory=dict)
    cluster: dict[str, Any] = field(default_factory=dict)
    grouping: dict[str, Any] = field(default_factory=dict)
    alignment: dict[str, Any] = field(default_factory=dict)
    connectors: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.cluster_index = int(self.cluster_index)
        self.stage = str(self.stage)

        metadata = dict(self.metadata)
        metadata.setdefault("schema_version", TRACE_SCHEMA_VERSION)
        self.metadata = metadata

    def to_dict(self) -> dict[str, Any]:
        """Return a flattened dictionary suitable for JSON/CSV output."""

        flattened: dict[str, Any] = {
            "cluster_index": self.cluster_index,
            "stage": self.stage,
        }

        for section_name, section in (
            ("metadata", self.metadata),
            ("cluster", self.cluster),
            ("grouping", self.grouping),
            ("alignment", self.alignment),
            ("connectors", self.connectors),
        ):
            for key, value in section.items():
                flattened[f"{section_name}.{key}"] = value

        return flattened


__all__ = ["TRACE_SCHEMA_VERSION", "TraceRecord", "hash_payload"]
