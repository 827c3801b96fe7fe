from __future__ import annotations

import locale
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from .features import Feature, Placemark, Segment
from .projects import Channel, ProjectReference

PLACEMARK_MARKER_SPACING = 10


@dataclass(frozen=True, slots=True)
class ChannelStroke:
    color: str
    offset: float


def segment_strokes(channels: Sequence[Channel]) -> list[ChannelStroke]:
    offset = -(len(channels) - 1) / 2
    strokes = []
    for channel in channels:
        strokes.append(ChannelStroke(channel.color, offset))
        offset += 1
    return strokes


def placemark_markers(channels: Sequence[Channel]) -> list[ChannelStroke]:
    return [
        ChannelStroke(channel.color, index * PLACEMARK_MARKER_SPACING)
        for index, channel in enumerate(channels)
    ]


def title_sort_key(project: ProjectReference) -> tuple[str, str]:
    title = project.display_title
    return (locale.strxfrm(title.casefold()), title)


def sort_projects(projects: Iterable[ProjectReference]) -> list[ProjectReference]:
    return sorted(projects, key=title_sort_key)


def inspection_text(projects: Iterable[ProjectReference]) -> str:
    return "".join(f"{project.display_title}\n" for project in projects)


class Renderer(Protocol):
    def draw_segment(self, segment: Segment, strokes: list[ChannelStroke]) -> None: ...

    def draw_placemark(self, placemark: Placemark, markers: list[ChannelStroke]) -> None: ...

    def show_projects(
        self, feature: Feature, projects: list[ProjectReference]
    ) -> None: ...


class NullRenderer:
    def draw_segment(self, segment: Segment, strokes: list[ChannelStroke]) -> None:
        return None

    def draw_placemark(self, placemark: Placemark, markers: list[ChannelStroke]) -> None:
        return None

    def show_projects(
        self, feature: Feature, projects: list[ProjectReference]
    ) -> None:
        return None


@dataclass
class RecordingRenderer:
    """Keeps the latest draw call per feature."""

    drawn: dict[int, list[ChannelStroke]] = field(default_factory=dict)
    draw_calls: int = 0
    shown: list[list[ProjectReference]] = field(default_factory=list)

    def draw_segment(self, segment: Segment, strokes: list[ChannelStroke]) -> None:
        self.drawn[id(segment)] = strokes
        self.draw_calls += 1

    def draw_placemark(self, placemark: Placemark, markers: list[ChannelStroke]) -> None:
        self.drawn[id(placemark)] = markers
        self.draw_calls += 1

    def show_projects(
        self, feature: Feature, projects: list[ProjectReference]
    ) -> None:
        self.shown.append(projects)

    def strokes_for(self, feature: Feature) -> list[ChannelStroke] | None:
        return self.drawn.get(id(feature))
