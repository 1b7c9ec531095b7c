from __future__ import annotations

import json
from pathlib import Path

from propsite.config import load_config
from propsite.validation import IssueSeverity, lint_site

from conftest import write_json


def _messages(report, severity: IssueSeverity) -> list[tuple[str, str]]:
    return [(issue.asset_path, issue.message) for issue in report.issues if issue.severity is severity]


def _edit_manifest(site: Path, edit) -> None:
    path = site / "site-assets.json"
    manifest = json.loads(path.read_text(encoding="utf-8"))
    edit(manifest["assets"])
    write_json(path, manifest)


def test_example_site_is_clean(site_dir: Path) -> None:
    report = lint_site(load_config(site_dir))

    assert report.issues == []
    assert report.asset_count == 7


def test_missing_manifest_is_an_error(tmp_path: Path) -> None:
    report = lint_site(load_config(tmp_path))

    assert report.error_count == 1
    assert "Manifest not found" in report.issues[0].message


def test_missing_file_and_unknown_handler(site_dir: Path) -> None:
    (site_dir / "content" / "facts.json").unlink()
    _edit_manifest(site_dir, lambda assets: assets.append({"path": "content/x.json", "type": "json", "handler": "ghost"}))
    write_json(site_dir / "content" / "x.json", {})

    errors = _messages(lint_site(load_config(site_dir)), IssueSeverity.ERROR)

    assert ("content/facts.json", "File does not exist.") in errors
    assert ("content/x.json", "Handler 'ghost' is not registered.") in errors


def test_schema_violations_carry_pointer(site_dir: Path) -> None:
    write_json(site_dir / "content" / "property.json", {"address": 12})

    report = lint_site(load_config(site_dir))

    issues = [issue for issue in report.issues if issue.asset_path == "content/property.json"]
    assert {issue.pointer for issue in issues} == {None, "address"}
    assert any("'price' is a required property" in issue.message for issue in issues)


def test_invalid_declared_schema(site_dir: Path) -> None:
    def edit(assets: list) -> None:
        assets[2]["schema"] = {"type": "not-a-type"}

    _edit_manifest(site_dir, edit)

    errors = _messages(lint_site(load_config(site_dir)), IssueSeverity.ERROR)
    assert any(message.startswith("Declared schema is invalid") for _, message in errors)


def test_invalid_json_content(site_dir: Path) -> None:
    (site_dir / "content" / "facts.json").write_text("{", encoding="utf-8")

    errors = _messages(lint_site(load_config(site_dir)), IssueSeverity.ERROR)
    assert any(path == "content/facts.json" and "Invalid JSON" in message for path, message in errors)


def test_non_utf8_content_and_manifest_are_errors(site_dir: Path) -> None:
    (site_dir / "content" / "facts.json").write_bytes(b'{"a": "\xff\xfe"}')

    errors = _messages(lint_site(load_config(site_dir)), IssueSeverity.ERROR)
    assert any(path == "content/facts.json" and "Invalid JSON" in message for path, message in errors)

    (site_dir / "site-assets.json").write_bytes(b'{"assets": [], "note": "\xe9"}')

    report = lint_site(load_config(site_dir))
    assert report.error_count == 1
    assert "not UTF-8" in report.issues[0].message


def test_warnings_for_size_extension_requires_and_duplicates(site_dir: Path) -> None:
    def edit(assets: list) -> None:
        assets[0]["maxSize"] = 1
        assets[0]["allowedExtensions"] = [".png"]
        assets[1]["requires"] = ["content/ghost.json"]
        assets.append({"path": "content/summary.md", "type": "text"})
        assets[6]["maxSize"] = 2

    _edit_manifest(site_dir, edit)

    report = lint_site(load_config(site_dir))
    warnings = _messages(report, IssueSeverity.WARNING)
    errors = _messages(report, IssueSeverity.ERROR)

    assert any(path == "assets/hero.jpg" and "maxSize is 1" in message for path, message in warnings)
    assert any(path == "assets/hero.jpg" and "allowed extensions" in message for path, message in warnings)
    assert any("content/ghost.json" in message for _, message in warnings)
    assert any(path == "assets/gallery/" and message.startswith("a.jpg is") for path, message in warnings)
    assert ("content/summary.md", "Path is listed more than once in the manifest.") in errors


def test_combo_overlap_and_missing_directory(site_dir: Path) -> None:
    def edit(assets: list) -> None:
        assets.append(
            {
                "path": "assets/photos/",
                "type": "directory",
                "contains": {
                    "type": "combo",
                    "parts": [
                        {"assetType": "json", "allowedExtensions": [".json"]},
                        {"assetType": "text", "allowedExtensions": [".json", ".md"]},
                    ],
                },
            }
        )
        assets.append({"path": "assets/nowhere/", "type": "directory"})

    _edit_manifest(site_dir, edit)
    (site_dir / "assets" / "photos").mkdir()

    report = lint_site(load_config(site_dir))

    assert any(
        path == "assets/photos/" and "'text' takes precedence" in message
        for path, message in _messages(report, IssueSeverity.WARNING)
    )
    assert ("assets/nowhere/", "Directory does not exist.") in _messages(report, IssueSeverity.ERROR)
