from __future__ import annotations

import copy
import logging
from collections.abc import Mapping

from .dataset import MapData, ProjectRecord
from .errors import MalformedDataset

logger = logging.getLogger(__name__)


def attach_references(
    map_data: MapData, references: Mapping[str, list[ProjectRecord]]
) -> MapData:
    """Return a copy of ``map_data`` with each feature's ``projects`` filled in."""
    merged: MapData = copy.deepcopy(map_data)
    features = merged.get("features")
    if not isinstance(features, list):
        raise MalformedDataset("map data is missing a 'features' list")
    for feature in features:
        feature_id = feature.get("id") if isinstance(feature, dict) else None
        refs = references.get(feature_id) if isinstance(feature_id, str) else None
        if refs is None:
            raise MalformedDataset(f"unknown project reference: {feature_id}", feature)
        feature["projects"] = [dict(ref) for ref in refs]  # type: ignore[misc]
    logger.info("attached references to %d features", len(features))
    return merged
