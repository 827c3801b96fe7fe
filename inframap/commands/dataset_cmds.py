from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inframap.errors import InfraMapError
from inframap.properties import DIMENSIONS
from inframap.render import RecordingRenderer, inspection_text
from inframap.session import MapSession

from .common import apply_filter_options, read_map_data_or_exit, taxonomy_or_exit

FEATURE_KINDS = ("segment", "placemark")


def _filtered_session(
    dataset: Path,
    *,
    modes: Sequence[str] | None,
    statuses: Sequence[str] | None,
    timelines: Sequence[str] | None,
    config_path: Path | None,
) -> tuple[MapSession, RecordingRenderer]:
    taxonomy = taxonomy_or_exit(config_path)
    data = read_map_data_or_exit(dataset)
    renderer = RecordingRenderer()
    session = MapSession(taxonomy, renderer)
    apply_filter_options(
        session.masks, taxonomy, modes=modes, statuses=statuses, timelines=timelines
    )
    try:
        session.load(data)
    except InfraMapError as exc:
        print(f"[red]Failed to load {dataset}: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    return session, renderer


def filter_cmd(
    *,
    dataset: Path,
    modes: Sequence[str] | None,
    statuses: Sequence[str] | None,
    timelines: Sequence[str] | None,
    config_path: Path | None,
    show_inactive: bool,
) -> None:
    session, renderer = _filtered_session(
        dataset, modes=modes, statuses=statuses, timelines=timelines, config_path=config_path
    )
    table = Table(title=f"Features in {dataset.name}")
    table.add_column("Kind")
    table.add_column("#", justify="right")
    table.add_column("Ids")
    table.add_column("Active channels")

    visible = 0
    total = 0
    for kind, features in (("segment", session.segments), ("placemark", session.placemarks)):
        for index, feature in enumerate(features):
            total += 1
            strokes = renderer.strokes_for(feature) or []
            if strokes:
                visible += 1
            elif not show_inactive:
                continue
            colors = ", ".join(stroke.color for stroke in strokes) or "-"
            table.add_row(kind, str(index), ", ".join(feature.ids), colors)

    Console().print(table)
    print(f"[bold]{visible}[/bold] of {total} features visible ({session.masks})")


def inspect_cmd(
    *,
    dataset: Path,
    kind: str,
    index: int,
    modes: Sequence[str] | None,
    statuses: Sequence[str] | None,
    timelines: Sequence[str] | None,
    config_path: Path | None,
) -> None:
    if kind not in FEATURE_KINDS:
        print(f"[red]Invalid kind '{kind}'. Allowed kinds: {', '.join(FEATURE_KINDS)}[/red]")
        raise typer.Exit(code=1)
    session, _ = _filtered_session(
        dataset, modes=modes, statuses=statuses, timelines=timelines, config_path=config_path
    )
    features = session.segments if kind == "segment" else session.placemarks
    if not 0 <= index < len(features):
        print(f"[red]No {kind} at index {index} ({len(features)} loaded)[/red]")
        raise typer.Exit(code=1)
    projects = session.inspect(features[index])
    if not projects:
        print("[yellow]No active projects[/yellow]")
        return
    print(escape(inspection_text(projects)), end="")


def taxonomy_cmd(*, config_path: Path | None) -> None:
    taxonomy = taxonomy_or_exit(config_path)
    table = Table(title="Taxonomy")
    table.add_column("Dimension")
    table.add_column("Bit", justify="right")
    table.add_column("Id")
    table.add_column("Default color")
    for dimension in DIMENSIONS:
        for position, property_id in enumerate(taxonomy.index(dimension)):
            color = taxonomy.default_colors.get(property_id, "") if dimension == "mode" else ""
            table.add_row(dimension, str(position), property_id, color)
    Console().print(table)
