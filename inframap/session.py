from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .features import Feature, Placemark, Segment
from .loader import FeatureLoader, LoadedDataset
from .projects import ProjectReference
from .properties import PropertyMaskSet, Taxonomy, validate_dimension
from .render import NullRenderer, Renderer, placemark_markers, segment_strokes, sort_projects

logger = logging.getLogger(__name__)


class MapSession:
    """Viewer filter state over one loaded dataset.

    Every filter change runs a recompute pass over all features and hands
    only the features whose active channels changed to the renderer.
    """

    def __init__(self, taxonomy: Taxonomy, renderer: Renderer | None = None) -> None:
        self.taxonomy = taxonomy
        self.renderer: Renderer = renderer or NullRenderer()
        self.loader = FeatureLoader(taxonomy)
        self.masks: PropertyMaskSet = taxonomy.all_masks()
        self.dataset = LoadedDataset()

    @property
    def segments(self) -> list[Segment]:
        return self.dataset.segments

    @property
    def placemarks(self) -> list[Placemark]:
        return self.dataset.placemarks

    def load(self, data: Mapping[str, Any]) -> LoadedDataset:
        dataset = self.loader.load(data)
        self.dataset = dataset
        self.refresh()
        return dataset

    def refresh(self) -> list[Feature]:
        changed: list[Feature] = []
        for segment in self.dataset.segments:
            if segment.recompute(self.masks):
                self.renderer.draw_segment(segment, segment_strokes(segment.state.active_channels()))
                changed.append(segment)
        for placemark in self.dataset.placemarks:
            if placemark.recompute(self.masks):
                self.renderer.draw_placemark(
                    placemark, placemark_markers(placemark.state.active_channels())
                )
                changed.append(placemark)
        logger.debug(
            "recompute pass: %d of %d features changed (%s)",
            len(changed),
            len(self.dataset.segments) + len(self.dataset.placemarks),
            self.masks,
        )
        return changed

    def toggle(self, dimension: str, property_id: str, enabled: bool) -> list[Feature]:
        name = validate_dimension(dimension)
        position = self.taxonomy.index(name).index_of(property_id)
        self.masks.dimension(name).set_enabled(position, enabled)
        return self.refresh()

    def set_all(self, dimension: str, enabled: bool) -> list[Feature]:
        self.masks.dimension(dimension).set_all_enabled(enabled)
        return self.refresh()

    def is_enabled(self, dimension: str, property_id: str) -> bool:
        name = validate_dimension(dimension)
        position = self.taxonomy.index(name).index_of(property_id)
        return self.masks.dimension(name).is_enabled(position)

    def inspect(self, feature: Feature) -> list[ProjectReference]:
        projects = sort_projects(feature.state.active_projects())
        self.renderer.show_projects(feature, projects)
        return projects
