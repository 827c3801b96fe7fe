from __future__ import annotations

from pathlib import Path

import typer
from rich import print

from inframap.dataset import validate_jsonp_template, write_map_data
from inframap.errors import InfraMapError
from inframap.markdown_refs import extract_references_from_path
from inframap.merge import attach_references

from .common import read_map_data_or_exit, taxonomy_or_exit


def merge_cmd(
    *,
    map_path: Path,
    markdown_path: Path,
    output_path: Path,
    jsonp: str | None,
    config_path: Path | None,
) -> None:
    if jsonp is not None:
        try:
            validate_jsonp_template(jsonp)
        except ValueError as exc:
            print(f"[red]Invalid --jsonp template: {exc}[/red]")
            raise typer.Exit(code=1) from exc
    taxonomy = taxonomy_or_exit(config_path)
    map_data = read_map_data_or_exit(map_path)
    try:
        references = extract_references_from_path(markdown_path, taxonomy)
        merged = attach_references(map_data, references)
        write_map_data(merged, output_path, jsonp=jsonp)
    except OSError as exc:
        print(f"[red]Merge failed: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    except InfraMapError as exc:
        print(f"[red]Invalid input: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    features = len(merged.get("features") or [])
    print(f"[green]Wrote {features} features to {output_path}[/green]")
