"""Deterministic per-cluster colour seeds."""

from __future__ import annotations

from typing import Tuple


PRIME_TABLE: Tuple[int, ...] = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47)
HUE_MULTIPLIER = 13


def cluster_hue(cluster_index: int) -> int:
    """Return the hue (0-359) assigned to ``cluster_index``.

    Hues repeat once the index wraps ``PRIME_TABLE`` and may collide earlier
    because of the modulus; callers that need distinct colours for large
    layouts must handle collisions themselves.
    """

    prime = PRIME_TABLE[cluster_index % len(PRIME_TABLE)]
    return (prime * HUE_MULTIPLIER) % 360


def cluster_color(cluster_index: int, *, saturation: int = 65, lightness: int = 88) -> str:
    """Return a CSS ``hsl()`` colour built from :func:`cluster_hue`."""

    return f"hsl({cluster_hue(cluster_index)}, {saturation}%, {lightness}%)"


def cluster_label(cluster_index: int) -> str:
    return f"Cluster {cluster_index + 1}"


__all__ = ["HUE_MULTIPLIER", "PRIME_TABLE", "cluster_color", "cluster_hue", "cluster_label"]
