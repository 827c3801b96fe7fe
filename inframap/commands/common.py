from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import typer
from rich import print

from inframap.config import build_taxonomy, load_config
from inframap.dataset import MapData, read_map_data
from inframap.errors import InfraMapError
from inframap.properties import DIMENSIONS, PropertyMaskSet, Taxonomy


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def taxonomy_or_exit(config_path: Path | None = None) -> Taxonomy:
    try:
        return build_taxonomy(load_config(config_path))
    except ValueError as exc:
        print(f"[red]Invalid config: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def read_map_data_or_exit(path: Path) -> MapData:
    try:
        return read_map_data(path)
    except OSError as exc:
        print(f"[red]Failed to read {path}: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    except InfraMapError as exc:
        print(f"[red]Invalid dataset {path}: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def apply_filter_options(
    masks: PropertyMaskSet,
    taxonomy: Taxonomy,
    *,
    modes: Sequence[str] | None,
    statuses: Sequence[str] | None,
    timelines: Sequence[str] | None,
) -> PropertyMaskSet:
    """Restrict each dimension to the given ids; an omitted dimension stays fully enabled."""
    selections = dict(zip(DIMENSIONS, (modes, statuses, timelines)))
    for dimension, selected in selections.items():
        if not selected:
            continue
        index = taxonomy.index(dimension)
        mask = masks.dimension(dimension)
        mask.set_all_enabled(False)
        try:
            for property_id in selected:
                mask.set_enabled(index.index_of(property_id), True)
        except InfraMapError as exc:
            print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1) from exc
    return masks
