from __future__ import annotations

import json
from pathlib import Path

import pytest

from inframap.dataset import dump_map_data, parse_map_data, read_map_data, write_map_data
from inframap.errors import MalformedDataset
from inframap.merge import attach_references


def test_attach_references_fills_projects() -> None:
    map_data = {
        "features": [{"id": "a"}, {"id": "b"}],
        "segments": [{"ids": ["a", "b"], "line": "xyz"}],
        "placemarks": [],
    }
    refs = {
        "a": [{"title": ["Transit", "A"], "status": "planned"}],
        "b": [{"title": ["Freight", "B"], "status": "eval", "timeline": "now"}],
    }
    merged = attach_references(map_data, refs)

    assert merged["features"][0]["projects"] == refs["a"]
    assert merged["features"][1]["projects"] == refs["b"]
    assert "projects" not in map_data["features"][0]
    assert merged["segments"] == map_data["segments"]


def test_attach_references_rejects_unknown_feature() -> None:
    with pytest.raises(MalformedDataset, match="unknown project reference: c"):
        attach_references({"features": [{"id": "c"}]}, {"a": []})
    with pytest.raises(MalformedDataset):
        attach_references({"segments": []}, {})


def test_jsonp_round_trip(tmp_path: Path) -> None:
    data = {"features": [{"id": "a (north)", "projects": []}]}
    path = write_map_data(data, tmp_path / "out" / "data.js", jsonp="loadMapData(%s);")

    raw = path.read_text()
    assert raw.startswith("loadMapData({")
    assert read_map_data(path) == data


def test_dump_map_data_plain_json() -> None:
    assert json.loads(dump_map_data({"features": []})) == {"features": []}
    with pytest.raises(ValueError, match="exactly one"):
        dump_map_data({}, jsonp="cb()")


@pytest.mark.parametrize("raw", ["", "   ", "not json", "[1, 2]", "{broken"])
def test_parse_map_data_rejects_bad_payloads(raw: str) -> None:
    with pytest.raises(MalformedDataset):
        parse_map_data(raw)


def test_parse_map_data_accepts_assignment_wrapper() -> None:
    assert parse_map_data('var mapData = {"features": []};\n') == {"features": []}


def test_read_map_data_rejects_non_utf8(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_bytes(b'{"features": ["\xff"]}')
    with pytest.raises(MalformedDataset, match="not utf-8"):
        read_map_data(path)
