from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from typer.testing import CliRunner

from inframap import __version__
from inframap.cli import app

runner = CliRunner()


def _write_dataset(tmp_path: Path, data: dict[str, Any]) -> Path:
    path = tmp_path / "data.json"
    path.write_text(json.dumps(data))
    return path


def test_root_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("merge", "filter", "inspect", "taxonomy"):
        assert command in result.stdout


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_filter_reports_visible_features(tmp_path: Path, map_data: dict[str, Any]) -> None:
    dataset = _write_dataset(tmp_path, map_data)

    result = runner.invoke(app, ["filter", str(dataset)])
    assert result.exit_code == 0
    assert "3 of 3 features visible" in result.stdout

    result = runner.invoke(app, ["filter", str(dataset), "--mode", "Transit"])
    assert result.exit_code == 0
    assert "2 of 3 features visible" in result.stdout

    result = runner.invoke(
        app, ["filter", str(dataset), "--status", "eval", "--timeline", "someday"]
    )
    assert result.exit_code == 0
    assert "0 of 3 features visible" in result.stdout


def test_filter_rejects_unknown_ids(tmp_path: Path, map_data: dict[str, Any]) -> None:
    dataset = _write_dataset(tmp_path, map_data)
    result = runner.invoke(app, ["filter", str(dataset), "--mode", "Ferry"])
    assert result.exit_code == 1
    assert "unknown mode id" in result.stdout


def test_filter_rejects_bad_dataset(tmp_path: Path, map_data: dict[str, Any]) -> None:
    map_data["features"][0]["projects"][0]["status"] = "abandoned"
    dataset = _write_dataset(tmp_path, map_data)
    result = runner.invoke(app, ["filter", str(dataset)])
    assert result.exit_code == 1
    assert "Failed to load" in result.stdout

    missing = runner.invoke(app, ["filter", str(tmp_path / "missing.json")])
    assert missing.exit_code == 1


def test_inspect_lists_active_projects(tmp_path: Path, map_data: dict[str, Any]) -> None:
    dataset = _write_dataset(tmp_path, map_data)

    result = runner.invoke(
        app, ["inspect", str(dataset), "--kind", "placemark", "--index", "0", "--status", "planned"]
    )
    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["Transit - Line 5 extension"]

    result = runner.invoke(app, ["inspect", str(dataset), "--kind", "segment", "--index", "5"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["inspect", str(dataset), "--kind", "polygon"])
    assert result.exit_code == 1


def test_merge_writes_jsonp(tmp_path: Path) -> None:
    map_path = tmp_path / "map.json"
    map_path.write_text(
        json.dumps(
            {
                "features": [{"id": "line-5"}],
                "segments": [{"ids": ["line-5"], "line": "abc"}],
                "placemarks": [],
            }
        )
    )
    markdown_path = tmp_path / "projects.md"
    markdown_path.write_text("# Transit\n## Line 5\n<!-- id: line-5, status: planned -->\n")
    output_path = tmp_path / "out.js"

    result = runner.invoke(
        app,
        [
            "merge",
            "--map",
            str(map_path),
            "--markdown",
            str(markdown_path),
            "--output",
            str(output_path),
            "--jsonp",
            "var mapData = %s;",
        ],
    )
    assert result.exit_code == 0, result.stdout
    raw = output_path.read_text()
    assert raw.startswith("var mapData = ")
    data = json.loads(raw[len("var mapData = ") : -1])
    assert data["features"][0]["projects"] == [
        {"title": ["Transit", "Line 5"], "status": "planned", "headingId": "line-5"}
    ]

    filtered = runner.invoke(app, ["filter", str(output_path)])
    assert filtered.exit_code == 0
    assert "1 of 1 features visible" in filtered.stdout


def test_merge_reports_unknown_feature(tmp_path: Path) -> None:
    map_path = tmp_path / "map.json"
    map_path.write_text(json.dumps({"features": [{"id": "elsewhere"}]}))
    markdown_path = tmp_path / "projects.md"
    markdown_path.write_text("# Transit\n<!-- id: line-5, status: planned -->\n")

    result = runner.invoke(
        app,
        ["merge", "--map", str(map_path), "--markdown", str(markdown_path), "--output", str(tmp_path / "o.json")],
    )
    assert result.exit_code == 1
    assert "unknown project reference" in result.stdout


def test_taxonomy_uses_config(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text(json.dumps({"mode_ids": ["Ferry"]}))
    result = runner.invoke(app, ["taxonomy"])
    assert result.exit_code == 0
    assert "Ferry" in result.stdout
    assert "someday" in result.stdout


def test_filter_reports_non_utf8_dataset(tmp_path: Path) -> None:
    dataset = tmp_path / "data.json"
    dataset.write_bytes(b'{"features": [], "x": "\xff"}')
    result = runner.invoke(app, ["filter", str(dataset)])
    assert result.exit_code == 1
    assert "utf-8" in result.stdout


def test_merge_reports_non_utf8_markdown(tmp_path: Path) -> None:
    map_path = tmp_path / "map.json"
    map_path.write_text(json.dumps({"features": []}))
    markdown_path = tmp_path / "projects.md"
    markdown_path.write_bytes(b"# T\xff\n")

    result = runner.invoke(
        app,
        ["merge", "--map", str(map_path), "--markdown", str(markdown_path), "--output", str(tmp_path / "o.json")],
    )
    assert result.exit_code == 1
    assert "markdown" in result.stdout
    assert "utf-8" in result.stdout
    assert "jsonp" not in result.stdout


def test_merge_rejects_bad_jsonp_template(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "merge",
            "--map",
            str(tmp_path / "missing.json"),
            "--markdown",
            str(tmp_path / "missing.md"),
            "--output",
            str(tmp_path / "o.js"),
            "--jsonp",
            "callback()",
        ],
    )
    assert result.exit_code == 1
    assert "Invalid --jsonp template" in result.stdout
    assert not (tmp_path / "o.js").exists()
