from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Final

from .errors import UnknownPropertyId

MODE: Final = "mode"
STATUS: Final = "status"
TIMELINE: Final = "timeline"
DIMENSIONS: Final[tuple[str, ...]] = (MODE, STATUS, TIMELINE)

# Keeps every mask representable as a non-negative signed 32-bit value.
MAX_PROPERTY_COUNT: Final = 31


def validate_dimension(dimension: str) -> str:
    normalized = (dimension or "").strip().lower()
    if normalized in DIMENSIONS:
        return normalized
    raise ValueError(
        f"Invalid dimension '{dimension}'. Allowed dimensions: {', '.join(DIMENSIONS)}"
    )


class PropertyIndex:
    """Write-once mapping of property ids to dense bit positions."""

    __slots__ = ("dimension", "_positions")

    def __init__(self, dimension: str, property_ids: Iterable[str]) -> None:
        self.dimension = dimension
        positions: dict[str, int] = {}
        for property_id in property_ids:
            if property_id in positions:
                raise ValueError(f"duplicate {dimension} id: {property_id!r}")
            positions[property_id] = len(positions)
        if len(positions) > MAX_PROPERTY_COUNT:
            raise ValueError(
                f"too many {dimension} ids: {len(positions)} > {MAX_PROPERTY_COUNT}"
            )
        self._positions = positions

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, property_id: object) -> bool:
        return property_id in self._positions

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(self._positions)

    def find(self, property_id: str) -> int | None:
        return self._positions.get(property_id)

    def index_of(self, property_id: str) -> int:
        position = self._positions.get(property_id)
        if position is None:
            raise UnknownPropertyId(self.dimension, property_id)
        return position

    def new_mask(self) -> PropertyMask:
        return PropertyMask(len(self._positions))


class PropertyMask:
    """Bit set over one dimension; bit i set means property i is enabled."""

    __slots__ = ("width", "bits")

    def __init__(self, width: int, bits: int = 0) -> None:
        if width < 0:
            raise ValueError("mask width must be non-negative")
        self.width = width
        self.bits = bits & self._full()

    def _full(self) -> int:
        return (1 << self.width) - 1

    def _check(self, position: int) -> None:
        if not 0 <= position < self.width:
            raise IndexError(f"mask position {position} outside 0..{self.width - 1}")

    def set_enabled(self, position: int, enabled: bool) -> None:
        self._check(position)
        if enabled:
            self.bits |= 1 << position
        else:
            self.bits &= ~(1 << position)

    def set_all_enabled(self, enabled: bool) -> None:
        self.bits = self._full() if enabled else 0

    def is_enabled(self, position: int) -> bool:
        self._check(position)
        return bool((self.bits >> position) & 1)

    def is_active(self, other: PropertyMask) -> bool:
        return (self.bits & other.bits) != 0

    def copy(self) -> PropertyMask:
        return PropertyMask(self.width, self.bits)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyMask):
            return NotImplemented
        return self.width == other.width and self.bits == other.bits

    def __hash__(self) -> int:
        return hash((self.width, self.bits))

    def __repr__(self) -> str:
        return f"PropertyMask({self.bits:0{max(self.width, 1)}b})"


@dataclass(eq=True)
class PropertyMaskSet:
    mode: PropertyMask
    status: PropertyMask
    timeline: PropertyMask

    def is_active(self, other: PropertyMaskSet) -> bool:
        return (
            self.mode.is_active(other.mode)
            and self.status.is_active(other.status)
            and self.timeline.is_active(other.timeline)
        )

    def dimension(self, name: str) -> PropertyMask:
        return getattr(self, validate_dimension(name))

    def select_all(self) -> PropertyMaskSet:
        for name in DIMENSIONS:
            self.dimension(name).set_all_enabled(True)
        return self

    def copy(self) -> PropertyMaskSet:
        return PropertyMaskSet(self.mode.copy(), self.status.copy(), self.timeline.copy())

    def __str__(self) -> str:
        return f"mode: {self.mode.bits:b} status: {self.status.bits:b} time: {self.timeline.bits:b}"


@dataclass(frozen=True)
class Taxonomy:
    """The three property indices plus the default color for each mode."""

    modes: PropertyIndex
    statuses: PropertyIndex
    timelines: PropertyIndex
    default_colors: dict[str, str]

    @classmethod
    def from_ids(
        cls,
        mode_ids: Iterable[str],
        status_ids: Iterable[str],
        timeline_ids: Iterable[str],
        default_colors: dict[str, str] | None = None,
    ) -> Taxonomy:
        return cls(
            modes=PropertyIndex(MODE, mode_ids),
            statuses=PropertyIndex(STATUS, status_ids),
            timelines=PropertyIndex(TIMELINE, timeline_ids),
            default_colors=dict(default_colors or {}),
        )

    def index(self, dimension: str) -> PropertyIndex:
        name = validate_dimension(dimension)
        if name == MODE:
            return self.modes
        if name == STATUS:
            return self.statuses
        return self.timelines

    def empty_masks(self) -> PropertyMaskSet:
        return PropertyMaskSet(
            self.modes.new_mask(), self.statuses.new_mask(), self.timelines.new_mask()
        )

    def all_masks(self) -> PropertyMaskSet:
        return self.empty_masks().select_all()
