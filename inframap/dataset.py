from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, TypedDict

from .errors import MalformedDataset

JSONP_PAYLOAD_RE = re.compile(r"^[\w.$]+\s*\((?P<payload>.*)\)[\s;]*$", re.DOTALL)
ASSIGNMENT_PAYLOAD_RE = re.compile(
    r"^(?:var\s+|let\s+|const\s+)?[\w.$]+\s*=\s*(?P<payload>.*?)[\s;]*$", re.DOTALL
)


class ProjectRecord(TypedDict, total=False):
    title: list[str]
    status: str
    timeline: str
    color: str
    headingId: str


class FeatureRecord(TypedDict, total=False):
    id: str
    projects: list[ProjectRecord]


class SegmentRecord(TypedDict, total=False):
    ids: list[str]
    line: str


class PlacemarkRecord(TypedDict, total=False):
    ids: list[str]
    lat: float
    lng: float


class MapData(TypedDict, total=False):
    features: list[FeatureRecord]
    segments: list[SegmentRecord]
    placemarks: list[PlacemarkRecord]


def parse_map_data(raw: str) -> MapData:
    text = raw.strip()
    if not text:
        raise MalformedDataset("empty dataset")
    if not text.startswith(("{", "[")):
        match = JSONP_PAYLOAD_RE.match(text) or ASSIGNMENT_PAYLOAD_RE.match(text)
        if match is None:
            raise MalformedDataset("dataset is neither JSON nor JSONP")
        text = match.group("payload")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedDataset(f"invalid dataset json: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise MalformedDataset("dataset must be an object")
    return data  # type: ignore[return-value]


def read_map_data(path: Path) -> MapData:
    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedDataset(f"dataset is not utf-8: {exc.reason} at byte {exc.start}") from exc
    return parse_map_data(raw)


def validate_jsonp_template(jsonp: str) -> str:
    if jsonp.count("%s") != 1:
        raise ValueError("jsonp template must contain exactly one %s")
    return jsonp


def dump_map_data(data: MapData | dict[str, Any], *, jsonp: str | None = None) -> str:
    payload = json.dumps(data, ensure_ascii=False)
    if jsonp:
        return validate_jsonp_template(jsonp) % payload
    return payload


def write_map_data(
    data: MapData | dict[str, Any], path: Path, *, jsonp: str | None = None
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_map_data(data, jsonp=jsonp), encoding="utf-8")
    return path
