from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from inframap.config import build_taxonomy
from inframap.properties import Taxonomy


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("INFRAMAP_CONFIG", str(tmp_path / "config.json"))
    for name in ("INFRAMAP_MODE_IDS", "INFRAMAP_STATUS_IDS", "INFRAMAP_TIMELINE_IDS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def taxonomy() -> Taxonomy:
    return build_taxonomy()


@pytest.fixture
def map_data() -> dict[str, Any]:
    return {
        "features": [
            {
                "id": "burke-gilman",
                "projects": [
                    {"title": ["Pedestrian / Bike", "Burke-Gilman gap"], "status": "planned", "timeline": "soon"},
                ],
            },
            {
                "id": "line-5",
                "projects": [
                    {"title": ["Transit", "Line 5"], "status": "completed", "headingId": "line-5"},
                    {"title": ["Transit", "Line 5 extension"], "status": "planned", "timeline": "someday"},
                ],
            },
            {
                "id": "port-access",
                "projects": [
                    {"title": ["Freight", "Port access"], "status": "eval", "timeline": "now", "color": "red"},
                    {"title": ["Other", "Seawall"], "status": "planned", "timeline": "now", "color": "red"},
                ],
            },
        ],
        "segments": [
            {"ids": ["burke-gilman", "line-5"], "line": "_p~iF~ps|U_ulLnnqC"},
            {"ids": ["port-access"], "line": "_mqNvxq`@"},
        ],
        "placemarks": [
            {"ids": ["line-5"], "lat": 47.61, "lng": -122.33},
        ],
    }
