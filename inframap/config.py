from __future__ import annotations

import json
import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .properties import Taxonomy

DEFAULT_CONFIG_PATH = Path("~/.config/inframap/config.json").expanduser()

DEFAULT_MODE_IDS = ["Pedestrian / Bike", "Transit", "Freight", "Other"]
DEFAULT_STATUS_IDS = ["completed", "planned", "eval"]
DEFAULT_TIMELINE_IDS = ["completed", "now", "soon", "someday"]
DEFAULT_COLORS = {
    "Pedestrian / Bike": "rgb(1, 87, 155)",
    "Transit": "rgb(15, 157, 88)",
    "Freight": "rgb(165, 39, 20)",
    "Other": "rgb(230, 81, 0)",
}

CONFIG_ENV_OVERRIDES = {
    "mode_ids": "INFRAMAP_MODE_IDS",
    "status_ids": "INFRAMAP_STATUS_IDS",
    "timeline_ids": "INFRAMAP_TIMELINE_IDS",
}

LIST_KEYS = {"mode_ids", "status_ids", "timeline_ids"}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("INFRAMAP_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class InfraMapConfig:
    mode_ids: list[str] = field(default_factory=lambda: list(DEFAULT_MODE_IDS))
    status_ids: list[str] = field(default_factory=lambda: list(DEFAULT_STATUS_IDS))
    timeline_ids: list[str] = field(default_factory=lambda: list(DEFAULT_TIMELINE_IDS))
    # Colors for projects without an explicit color, keyed by mode id.
    default_colors: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLORS))


def _coerce_str_list(value: object, *, key: str) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, list):
        items: list[str] = []
        for item in value:
            if isinstance(item, str) and item.strip():
                items.append(item.strip())
        return items
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    warnings.warn(f"Invalid list for {key}: {value!r}", RuntimeWarning, stacklevel=2)
    return None


def _coerce_str_map(value: object, *, key: str) -> dict[str, str] | None:
    if not isinstance(value, dict):
        warnings.warn(f"Invalid mapping for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return None
    mapping: dict[str, str] = {}
    for name, color in value.items():
        if isinstance(name, str) and isinstance(color, str) and color.strip():
            mapping[name] = color.strip()
    return mapping


def load_config(path: Path | None = None) -> InfraMapConfig:
    cfg = InfraMapConfig()
    cfg = _apply_dict(cfg, read_config_file(path))
    cfg = _apply_env(cfg)
    return cfg


def _apply_dict(cfg: InfraMapConfig, data: dict[str, Any]) -> InfraMapConfig:
    for key, value in data.items():
        if not hasattr(cfg, key):
            continue
        if key in LIST_KEYS:
            parsed = _coerce_str_list(value, key=key)
            if parsed:
                setattr(cfg, key, parsed)
            continue
        if key == "default_colors":
            colors = _coerce_str_map(value, key=key)
            if colors is not None:
                cfg.default_colors = {**cfg.default_colors, **colors}
    return cfg


def _apply_env(cfg: InfraMapConfig) -> InfraMapConfig:
    for key, value in get_env_overrides().items():
        parsed = _coerce_str_list(value, key=key)
        if parsed:
            setattr(cfg, key, parsed)
    return cfg


def build_taxonomy(cfg: InfraMapConfig | None = None) -> Taxonomy:
    cfg = cfg or InfraMapConfig()
    return Taxonomy.from_ids(
        cfg.mode_ids,
        cfg.status_ids,
        cfg.timeline_ids,
        default_colors=cfg.default_colors,
    )
