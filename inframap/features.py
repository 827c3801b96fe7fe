from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from .projects import Channel, ProjectReference
from .properties import PropertyMaskSet


class FeatureChannelState:
    """Tracks which of a feature's channels pass the viewer filter.

    ``recompute`` reports whether the ordered active flags changed since the
    previous call so callers can skip re-rendering unchanged features.
    """

    __slots__ = ("channels", "previous_flags", "previous_active_count", "current_filter")

    def __init__(self, channels: Sequence[Channel]) -> None:
        self.channels: tuple[Channel, ...] = tuple(channels)
        self.previous_flags: tuple[bool, ...] = ()
        self.previous_active_count = 0
        self.current_filter: PropertyMaskSet | None = None

    def recompute(self, masks: PropertyMaskSet) -> bool:
        self.current_filter = masks.copy()
        flags: list[bool] = []
        active_count = 0
        for channel in self.channels:
            active = channel.is_active(masks)
            flags.append(active)
            if active:
                active_count += 1
        new_flags = tuple(flags)
        if new_flags == self.previous_flags:
            return False
        self.previous_flags = new_flags
        self.previous_active_count = active_count
        return True

    @property
    def active_count(self) -> int:
        return self.previous_active_count

    def active_channels(self) -> list[Channel]:
        return [
            channel
            for channel, active in zip(self.channels, self.previous_flags)
            if active
        ]

    def active_projects(self) -> list[ProjectReference]:
        # Channels are active when any member matches; the listing keeps only
        # the members that match on their own.
        if self.current_filter is None:
            return []
        projects: list[ProjectReference] = []
        for channel in self.active_channels():
            projects.extend(channel.group.active_members(self.current_filter))
        return projects


@dataclass(eq=False)
class Segment:
    state: FeatureChannelState
    line: str
    ids: tuple[str, ...] = ()
    kind: Literal["segment"] = field(default="segment", init=False)

    def recompute(self, masks: PropertyMaskSet) -> bool:
        return self.state.recompute(masks)


@dataclass(eq=False)
class Placemark:
    state: FeatureChannelState
    lat: float
    lng: float
    ids: tuple[str, ...] = ()
    kind: Literal["placemark"] = field(default="placemark", init=False)

    @property
    def position(self) -> tuple[float, float]:
        return (self.lat, self.lng)

    def recompute(self, masks: PropertyMaskSet) -> bool:
        return self.state.recompute(masks)


Feature = Segment | Placemark
