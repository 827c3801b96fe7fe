from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .properties import PropertyMaskSet


@dataclass(frozen=True, slots=True, eq=False)
class ProjectReference:
    """One project's titles, color and properties.

    The masks are copied on construction and must not be mutated afterwards.
    """

    masks: PropertyMaskSet
    titles: tuple[str, ...]
    color: str
    anchor_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "masks", self.masks.copy())
        object.__setattr__(self, "titles", tuple(self.titles))

    @property
    def mode_id(self) -> str:
        return self.titles[0]

    @property
    def display_title(self) -> str:
        return " - ".join(self.titles)

    def is_active(self, masks: PropertyMaskSet) -> bool:
        return self.masks.is_active(masks)


class ProjectReferenceGroup:
    """Project references in load order; active when any member is."""

    __slots__ = ("refs",)

    def __init__(self, refs: Iterable[ProjectReference] = ()) -> None:
        self.refs: list[ProjectReference] = list(refs)

    def append(self, ref: ProjectReference) -> None:
        self.refs.append(ref)

    def is_active(self, masks: PropertyMaskSet) -> bool:
        return any(ref.is_active(masks) for ref in self.refs)

    def active_members(self, masks: PropertyMaskSet) -> list[ProjectReference]:
        return [ref for ref in self.refs if ref.is_active(masks)]

    def __iter__(self) -> Iterator[ProjectReference]:
        return iter(self.refs)

    def __len__(self) -> int:
        return len(self.refs)


@dataclass(slots=True)
class Channel:
    color: str
    group: ProjectReferenceGroup = field(default_factory=ProjectReferenceGroup)

    def is_active(self, masks: PropertyMaskSet) -> bool:
        return self.group.is_active(masks)


def group_channels(project_lists: Iterable[Iterable[ProjectReference]]) -> list[Channel]:
    """Group references into one channel per color, in first-seen order.

    Color is compared as an exact, case-sensitive string.
    """
    channels: list[Channel] = []
    by_color: dict[str, Channel] = {}
    for projects in project_lists:
        for ref in projects:
            channel = by_color.get(ref.color)
            if channel is None:
                channel = Channel(ref.color)
                by_color[ref.color] = channel
                channels.append(channel)
            channel.group.append(ref)
    return channels
