from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from propsite.cli import app
from propsite.manifest import read_manifest


def test_render_writes_populated_page(config_file: Path, site_dir: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["render", "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "Assets loaded" in result.output
    assert "Lightbox" in result.output
    rendered = (site_dir / "dist" / "index.html").read_text(encoding="utf-8")
    assert "123 Main St" in rendered
    assert 'src="assets/gallery/a.jpg"' in rendered


def test_render_output_override(config_file: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    target = tmp_path / "out" / "page.html"

    result = runner.invoke(app, ["render", "--config", str(config_file), "--output", str(target)])

    assert result.exit_code == 0, result.output
    assert target.exists()


def test_render_reports_manifest_failure(config_file: Path, site_dir: Path) -> None:
    (site_dir / "site-assets.json").write_text("{broken", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["render", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "Manifest failed to load" in result.output
    assert not (site_dir / "dist").exists()


def test_missing_config_is_a_bad_parameter(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["lint", "--config", str(tmp_path / "absent.yml")])

    assert result.exit_code == 2


def test_add_asset_non_interactive(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "add-asset",
            "content/contact.json",
            "--yes",
            "--handler",
            "contact",
            "--config",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert '@register("contact")' in result.output
    manifest = read_manifest(tmp_path / "site-assets.json")
    asset = manifest.assets[0]
    assert asset.path == "content/contact.json"
    assert asset.handler == "contact"
    assert asset.json_schema is not None
    assert asset.json_schema["required"] == ["email", "phone"]
    assert (tmp_path / "content" / "contact.json").exists()


def test_add_asset_records_required_paths(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "add-asset",
            "assets/gallery/",
            "--type",
            "directory",
            "--contains",
            "flat",
            "--handler",
            "gallery",
            "--requires",
            "content/image-descriptions.json, content/captions.json",
            "--yes",
            "--config",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    asset = read_manifest(tmp_path / "site-assets.json").assets[0]
    assert asset.requires == ["content/image-descriptions.json", "content/captions.json"]
    assert asset.to_manifest_dict()["requires"] == asset.requires


def test_add_asset_prompts_for_missing_values(tmp_path: Path) -> None:
    runner = CliRunner()
    answers = "\n".join(["assets/photos/", "directory", "Photos", "Listing photos", "1000", "combo"]) + "\n"

    result = runner.invoke(app, ["add-asset", "--config", str(tmp_path)], input=answers)

    assert result.exit_code == 0, result.output
    asset = read_manifest(tmp_path / "site-assets.json").assets[0]
    assert asset.type == "directory"
    assert asset.label == "Photos"
    assert asset.max_size == 1000
    payload = asset.to_manifest_dict()
    assert payload["contains"]["type"] == "combo"
    assert [part["assetType"] for part in payload["contains"]["parts"]] == ["image", "json", "text"]


def test_add_asset_rejects_unknown_type(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app, ["add-asset", "x.bin", "--type", "binary", "--yes", "--config", str(tmp_path)]
    )

    assert result.exit_code == 2


def test_init_with_options(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "init",
            "--address",
            "7 Birch Rd",
            "--location",
            "Austin, TX 78701",
            "--price",
            "$720,000",
            "--yes",
            "--config",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Scaffold ready" in result.output
    prop = json.loads((tmp_path / "content" / "property.json").read_text(encoding="utf-8"))
    assert prop["price"] == "$720,000"


def test_init_requires_address(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["init", "--yes", "--config", str(tmp_path)])

    assert result.exit_code == 1
    assert "Address is required" in result.output


def test_generate_schema_appends_extension(tmp_path: Path) -> None:
    source = tmp_path / "contact.json"
    source.write_text(json.dumps({"email": "a@b.co", "phone": "555"}), encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["generate-schema", str(tmp_path / "contact")])

    assert result.exit_code == 0, result.output
    schema = json.loads((tmp_path / "contact-schema.json").read_text(encoding="utf-8"))
    assert schema["properties"]["email"]["format"] == "email"


def test_generate_schema_stdout_and_missing(tmp_path: Path) -> None:
    source = tmp_path / "facts.json"
    source.write_text("[1, 2]", encoding="utf-8")
    runner = CliRunner()

    printed = runner.invoke(app, ["generate-schema", str(source), "--stdout"])
    missing = runner.invoke(app, ["generate-schema", str(tmp_path / "nope.json")])

    assert printed.exit_code == 0, printed.output
    assert json.loads(printed.output) == {"type": "array", "items": {"type": "integer"}}
    assert not (tmp_path / "facts-schema.json").exists()
    assert missing.exit_code == 1
    assert "Schema generation failed" in missing.output


def test_index_writes_directory_indexes(config_file: Path, site_dir: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["index", "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    index = site_dir / "assets" / "gallery" / "directory-index.json"
    assert json.loads(index.read_text(encoding="utf-8")) == {"files": ["a.jpg", "b.png"]}


def test_lint_clean_and_strict(config_file: Path, site_dir: Path) -> None:
    runner = CliRunner()

    clean = runner.invoke(app, ["lint", "--config", str(config_file)])
    assert clean.exit_code == 0, clean.output
    assert "Lint clean" in clean.output

    manifest = json.loads((site_dir / "site-assets.json").read_text(encoding="utf-8"))
    manifest["assets"][0]["maxSize"] = 1
    (site_dir / "site-assets.json").write_text(json.dumps(manifest), encoding="utf-8")

    relaxed = runner.invoke(app, ["lint", "--config", str(config_file)])
    strict = runner.invoke(app, ["lint", "--config", str(config_file), "--strict"])

    assert relaxed.exit_code == 0, relaxed.output
    assert "WARNING" in relaxed.output
    assert strict.exit_code == 1


def test_lint_reports_errors(config_file: Path, site_dir: Path) -> None:
    (site_dir / "content" / "summary.md").unlink()
    runner = CliRunner()

    result = runner.invoke(app, ["lint", "--config", str(config_file)])

    assert result.exit_code == 1
    assert "content/summary.md" in result.output
    assert "1 error(s)" in result.output
