from __future__ import annotations

from pathlib import Path

import typer

from . import __version__
from .commands.common import configure_logging
from .commands.dataset_cmds import filter_cmd, inspect_cmd, taxonomy_cmd
from .commands.merge_cmds import merge_cmd

app = typer.Typer(help="inframap: filter infrastructure project features by mode, status and timeline")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    configure_logging(verbose)


@app.command()
def merge(
    map_path: Path = typer.Option(..., "--map", help="Map data JSON with features, segments and placemarks"),
    markdown_path: Path = typer.Option(..., "--markdown", help="Markdown document with project comments"),
    output_path: Path = typer.Option(..., "--output", help="Path to write merged JSON"),
    jsonp: str = typer.Option(None, help="JSONP template (one %s) to wrap the output"),
    config: Path = typer.Option(None, help="Path to inframap config JSON"),
) -> None:
    """Attach Markdown project references to map features."""

    merge_cmd(
        map_path=map_path,
        markdown_path=markdown_path,
        output_path=output_path,
        jsonp=jsonp,
        config_path=config,
    )


@app.command("filter")
def filter_features(
    dataset: Path = typer.Argument(..., help="Merged dataset (JSON or JSONP)"),
    mode: list[str] = typer.Option(None, help="Enabled mode id; repeat for several"),
    status: list[str] = typer.Option(None, help="Enabled status id; repeat for several"),
    timeline: list[str] = typer.Option(None, help="Enabled timeline id; repeat for several"),
    show_inactive: bool = typer.Option(False, help="Also list features with no active channel"),
    config: Path = typer.Option(None, help="Path to inframap config JSON"),
) -> None:
    """Show which features and channels a filter leaves visible."""

    filter_cmd(
        dataset=dataset,
        modes=mode,
        statuses=status,
        timelines=timeline,
        config_path=config,
        show_inactive=show_inactive,
    )


@app.command()
def inspect(
    dataset: Path = typer.Argument(..., help="Merged dataset (JSON or JSONP)"),
    kind: str = typer.Option("segment", help="Feature kind: segment or placemark"),
    index: int = typer.Option(0, help="Feature position within its kind"),
    mode: list[str] = typer.Option(None, help="Enabled mode id; repeat for several"),
    status: list[str] = typer.Option(None, help="Enabled status id; repeat for several"),
    timeline: list[str] = typer.Option(None, help="Enabled timeline id; repeat for several"),
    config: Path = typer.Option(None, help="Path to inframap config JSON"),
) -> None:
    """List the active projects of one feature."""

    inspect_cmd(
        dataset=dataset,
        kind=kind,
        index=index,
        modes=mode,
        statuses=status,
        timelines=timeline,
        config_path=config,
    )


@app.command()
def taxonomy(config: Path = typer.Option(None, help="Path to inframap config JSON")) -> None:
    """Show configured mode, status and timeline ids."""

    taxonomy_cmd(config_path=config)


if __name__ == "__main__":
    app()
