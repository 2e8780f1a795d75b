"""Configuration for the layout pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Literal

from ..clustering.vertical import GroupingStrategy


CardSizing = Literal["fixed", "fibonacci"]
UnpairedPolicy = Literal["exclude", "singleton"]

_GROUPING_CHOICES = ("chain", "positional")
_SIZING_CHOICES = ("fixed", "fibonacci")
_UNPAIRED_CHOICES = ("exclude", "singleton")


class LayoutConfigurationError(ValueError):
    """Raised when layout parameters are inconsistent."""


@dataclass(frozen=True, slots=True)
class LayoutParameters:
    """Layout constants and strategy switches.

    Attributes
    ----------
    card_width:
        Width of one item card in pixels. With ``card_sizing="fibonacci"`` this
        is the width of the first two slots.
    card_gap:
        Gap between neighbouring cards.
    connector_width:
        Width of the horizontal connector drawn between neighbouring cards.
    connector_spacing:
        Pixel nudge applied per extra connector landing on the same cluster.
    card_sizing:
        ``"fixed"`` gives every slot ``card_width``; ``"fibonacci"`` widens slots
        along a capped Fibonacci-like sequence.
    card_width_step:
        Increment seeding the Fibonacci sequence (second term is
        ``card_width + card_width_step``).
    max_card_width:
        Cap applied to Fibonacci slot widths.
    grouping:
        Ordering of clusters inside a super-cluster (``"chain"`` or
        ``"positional"``).
    unpaired_items:
        ``"exclude"`` drops items that appear in no horizontal pair;
        ``"singleton"`` places each of them in a one-item cluster.
    """

    card_width: float = 140.0
    card_gap: float = 16.0
    connector_width: float = 40.0
    connector_spacing: float = 6.0
    card_sizing: CardSizing = "fixed"
    card_width_step: float = 20.0
    max_card_width: float = 250.0
    grouping: GroupingStrategy = "chain"
    unpaired_items: UnpairedPolicy = "exclude"

    def __post_init__(self) -> None:
        for name in ("card_width", "card_gap", "connector_width", "connector_spacing", "card_width_step"):
            value = float(getattr(self, name))
            if value < 0:
                raise LayoutConfigurationError(f"{name} must be non-negative; received {value}")
            object.__setattr__(self, name, value)

        max_card_width = float(self.max_card_width)
        if max_card_width < self.card_width:
            raise LayoutConfigurationError("max_card_width must be at least card_width")
        object.__setattr__(self, "max_card_width", max_card_width)

        if self.card_sizing not in _SIZING_CHOICES:
            raise LayoutConfigurationError(f"Unsupported card sizing '{self.card_sizing}'")
        if self.grouping not in _GROUPING_CHOICES:
            raise LayoutConfigurationError(f"Unsupported grouping strategy '{self.grouping}'")
        if self.unpaired_items not in _UNPAIRED_CHOICES:
            raise LayoutConfigurationError(f"Unsupported unpaired item policy '{self.unpaired_items}'")

    @property
    def slot_stride(self) -> float:
        """Horizontal distance between neighbouring fixed-width slots."""

        return self.card_width + self.card_gap + self.connector_width

    def to_dict(self) -> Dict[str, float | str]:
        return asdict(self)


__all__ = [
    "CardSizing",
    "LayoutConfigurationError",
    "LayoutParameters",
    "UnpairedPolicy",
]
