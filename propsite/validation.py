"""Authoring-time lint checks for the manifest and the content it references."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from .combo import build_extension_map
from .config import Config
from .discovery import file_extension
from .handlers import HandlerRegistry, default_registry
from .manifest import (
    ComboContains,
    DirectoryAsset,
    FlatContains,
    JsonAsset,
    ManifestLoadError,
    read_manifest,
)


class IssueSeverity(Enum):
    """Severity level for lint issues."""

    ERROR = auto()
    WARNING = auto()


@dataclass(slots=True)
class AssetIssue:
    """Represents a lint finding for one manifest asset."""

    asset_path: str
    message: str
    severity: IssueSeverity
    pointer: str | None = None


@dataclass(slots=True)
class LintReport:
    """Aggregate lint results for a site."""

    issues: list[AssetIssue] = field(default_factory=list)
    asset_count: int = 0

    def add(self, asset_path: str, message: str, severity: IssueSeverity, pointer: str | None = None) -> None:
        self.issues.append(AssetIssue(asset_path, message, severity, pointer))

    def error(self, asset_path: str, message: str, pointer: str | None = None) -> None:
        self.add(asset_path, message, IssueSeverity.ERROR, pointer)

    def warning(self, asset_path: str, message: str) -> None:
        self.add(asset_path, message, IssueSeverity.WARNING)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.WARNING)


def lint_site(config: Config, registry: HandlerRegistry | None = None) -> LintReport:
    """Check the manifest under ``config.site_dir`` and every local file it names."""
    registry = registry if registry is not None else default_registry()
    report = LintReport()
    manifest_path = config.manifest_file

    try:
        manifest = read_manifest(manifest_path)
    except ManifestLoadError as exc:
        report.error(config.manifest_path, str(exc))
        return report

    report.asset_count = len(manifest.assets)
    known_paths = {asset.path for asset in manifest.assets}

    for path in manifest.duplicate_paths():
        report.error(path, "Path is listed more than once in the manifest.")

    for asset in manifest.assets:
        if asset.handler and asset.handler not in registry:
            report.error(asset.path, f"Handler '{asset.handler}' is not registered.")
        for required in asset.requires:
            if required not in known_paths:
                report.warning(asset.path, f"Required asset '{required}' is not in the manifest.")

        target = config.site_dir / asset.path.lstrip("/")
        if isinstance(asset, DirectoryAsset):
            _lint_directory(asset, target, report)
            continue

        if not target.is_file():
            report.error(asset.path, "File does not exist.")
            continue

        if asset.allowed_extensions and file_extension(target.name) not in asset.allowed_extensions:
            allowed = ", ".join(asset.allowed_extensions)
            report.warning(asset.path, f"Extension is not one of the allowed extensions ({allowed}).")

        size = target.stat().st_size
        if asset.max_size is not None and size > asset.max_size:
            report.warning(asset.path, f"File is {size} bytes; maxSize is {asset.max_size}.")

        if isinstance(asset, JsonAsset):
            _lint_json(asset, target, report)

    return report


def _lint_directory(asset: DirectoryAsset, target: Path, report: LintReport) -> None:
    if not target.is_dir():
        report.error(asset.path, "Directory does not exist.")
        return

    contains = asset.contains
    if isinstance(contains, ComboContains):
        claimed: dict[str, str] = {}
        for part in contains.parts:
            for ext in part.allowed_extensions:
                if ext in claimed and claimed[ext] != part.asset_type:
                    winner = build_extension_map(contains)[ext]
                    report.warning(
                        asset.path,
                        f"Extension {ext} appears in '{claimed[ext]}' and '{part.asset_type}' parts; "
                        f"'{winner}' takes precedence.",
                    )
                claimed[ext] = part.asset_type
        allowed = contains.allowed_extensions
    elif isinstance(contains, FlatContains):
        allowed = contains.allowed_extensions
    else:
        return

    if asset.max_size is None:
        return
    for entry in target.iterdir():
        if entry.is_file() and file_extension(entry.name) in allowed and entry.stat().st_size > asset.max_size:
            report.warning(
                asset.path,
                f"{entry.name} is {entry.stat().st_size} bytes; maxSize is {asset.max_size}.",
            )


def _lint_json(asset: JsonAsset, target: Path, report: LintReport) -> None:
    try:
        data: Any = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        report.error(asset.path, f"Invalid JSON: {exc}")
        return

    if asset.json_schema is None:
        return
    try:
        Draft202012Validator.check_schema(asset.json_schema)
    except SchemaError as exc:
        report.error(asset.path, f"Declared schema is invalid: {exc.message}")
        return
    validator = Draft202012Validator(asset.json_schema)
    errors = sorted(validator.iter_errors(data), key=lambda err: "/".join(str(elem) for elem in err.path))
    for error in errors:
        pointer = "/".join(str(elem) for elem in error.path)
        report.error(asset.path, error.message, pointer or None)
