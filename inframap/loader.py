from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .dataset import MapData
from .errors import MalformedDataset, UnknownPropertyId
from .features import Feature, FeatureChannelState, Placemark, Segment
from .projects import Channel, ProjectReference, group_channels
from .properties import Taxonomy

logger = logging.getLogger(__name__)


@dataclass
class LoadedDataset:
    projects_by_id: dict[str, list[ProjectReference]] = field(default_factory=dict)
    segments: list[Segment] = field(default_factory=list)
    placemarks: list[Placemark] = field(default_factory=list)

    def features(self) -> list[Feature]:
        return [*self.segments, *self.placemarks]


def _require_list(record: Mapping[str, Any], key: str, what: str) -> list[Any]:
    if not isinstance(record, Mapping):
        raise MalformedDataset(f"{what} must be an object", record)
    value = record.get(key)
    if not isinstance(value, list):
        raise MalformedDataset(f"{what} is missing a {key!r} list", record)
    return value


def _optional_list(record: Mapping[str, Any], key: str, what: str) -> list[Any]:
    if record.get(key) is None:
        return []
    return _require_list(record, key, what)


def _require_str(record: Mapping[str, Any], key: str, what: str) -> str:
    value = record.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedDataset(f"{what} is missing a {key!r} string", record)
    return value


def _optional_str(record: Mapping[str, Any], key: str, what: str) -> str | None:
    value = record.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise MalformedDataset(f"{what} has a non-string {key!r}", record)
    return value


def _require_number(record: Mapping[str, Any], key: str, what: str) -> float:
    value = record.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDataset(f"{what} is missing a numeric {key!r}", record)
    return float(value)


class FeatureLoader:
    """Builds project references and channel-grouped features for a taxonomy.

    Any bad record aborts the whole load.
    """

    def __init__(self, taxonomy: Taxonomy) -> None:
        self.taxonomy = taxonomy

    def create_project_ref(self, project: Mapping[str, Any]) -> ProjectReference:
        if not isinstance(project, Mapping):
            raise MalformedDataset("project must be an object", project)
        titles = _require_list(project, "title", "project")
        if not titles or not all(isinstance(t, str) for t in titles):
            raise MalformedDataset("project title must be a non-empty list of strings", project)
        status = _require_str(project, "status", "project")
        timeline = _optional_str(project, "timeline", "project")
        color = _optional_str(project, "color", "project")
        anchor_id = _optional_str(project, "headingId", "project")

        taxonomy = self.taxonomy
        masks = taxonomy.empty_masks()
        masks.mode.set_enabled(taxonomy.modes.index_of(titles[0]), True)
        masks.status.set_enabled(taxonomy.statuses.index_of(status), True)
        if timeline is not None:
            masks.timeline.set_enabled(taxonomy.timelines.index_of(timeline), True)
        else:
            masks.timeline.set_all_enabled(True)

        if color is None:
            color = taxonomy.default_colors.get(titles[0])
            if color is None:
                raise MalformedDataset(f"no color for project mode {titles[0]!r}", project)
        return ProjectReference(masks=masks, titles=tuple(titles), color=color, anchor_id=anchor_id)

    def build_channels(
        self, ids: Sequence[Any], projects_by_id: Mapping[str, list[ProjectReference]]
    ) -> list[Channel]:
        project_lists = []
        for feature_id in ids:
            if not isinstance(feature_id, str):
                raise MalformedDataset(f"feature id must be a string: {feature_id!r}")
            projects = projects_by_id.get(feature_id)
            if projects is None:
                raise MalformedDataset(f"unknown feature id: {feature_id!r}")
            project_lists.append(projects)
        return group_channels(project_lists)

    def load(self, data: MapData | Mapping[str, Any]) -> LoadedDataset:
        if not isinstance(data, Mapping):
            raise MalformedDataset("dataset must be an object")
        loaded = LoadedDataset()
        try:
            for feature in _require_list(data, "features", "dataset"):
                if not isinstance(feature, Mapping):
                    raise MalformedDataset("feature must be an object", feature)
                feature_id = _require_str(feature, "id", "feature")
                refs = [
                    self.create_project_ref(project)
                    for project in _require_list(feature, "projects", f"feature {feature_id!r}")
                ]
                loaded.projects_by_id[feature_id] = refs

            for segment in _optional_list(data, "segments", "dataset"):
                ids = _require_list(segment, "ids", "segment")
                channels = self.build_channels(ids, loaded.projects_by_id)
                line = _optional_str(segment, "line", "segment") or ""
                loaded.segments.append(
                    Segment(FeatureChannelState(channels), line=line, ids=tuple(ids))
                )

            for placemark in _optional_list(data, "placemarks", "dataset"):
                ids = _require_list(placemark, "ids", "placemark")
                channels = self.build_channels(ids, loaded.projects_by_id)
                loaded.placemarks.append(
                    Placemark(
                        FeatureChannelState(channels),
                        lat=_require_number(placemark, "lat", "placemark"),
                        lng=_require_number(placemark, "lng", "placemark"),
                        ids=tuple(ids),
                    )
                )
        except (UnknownPropertyId, MalformedDataset) as exc:
            logger.warning("dataset load rejected: %s", exc)
            raise

        logger.debug(
            "loaded %d features, %d segments, %d placemarks",
            len(loaded.projects_by_id),
            len(loaded.segments),
            len(loaded.placemarks),
        )
        return loaded
