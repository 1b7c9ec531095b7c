"""Pydantic models describing the site asset manifest."""

from __future__ import annotations

from collections import Counter
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

AssetType = Literal["json", "text", "image", "directory"]
PartType = Literal["json", "text", "image"]


def normalize_extension(value: str) -> str:
    """Return ``value`` lowercased with a single leading dot."""
    text = value.strip().lower()
    if not text:
        return ""
    if not text.startswith("."):
        text = f".{text}"
    return text


def _normalize_extensions(values: list[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        ext = normalize_extension(value)
        if ext and ext not in seen:
            seen.append(ext)
    return seen


class _WireModel(BaseModel):
    """Base for models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ComboPart(_WireModel):
    """One member kind of a combo directory (e.g. the image half of photo + sidecar)."""

    asset_type: PartType
    allowed_extensions: list[str] = Field(default_factory=list)

    @field_validator("allowed_extensions")
    def _normalize(cls, value: list[str]) -> list[str]:
        return _normalize_extensions(value)


class ComboContains(_WireModel):
    """Directory of per-item files grouped by shared base name."""

    type: Literal["combo"]
    parts: list[ComboPart] = Field(min_length=1)

    @property
    def allowed_extensions(self) -> list[str]:
        extensions: list[str] = []
        for part in self.parts:
            for ext in part.allowed_extensions:
                if ext not in extensions:
                    extensions.append(ext)
        return extensions


class FlatContains(_WireModel):
    """Directory whose matching files are exposed as a flat list of paths."""

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    allowed_extensions: list[str]

    @field_validator("allowed_extensions")
    def _normalize(cls, value: list[str]) -> list[str]:
        return _normalize_extensions(value)


class _AssetBase(_WireModel):
    model_config = ConfigDict(extra="allow")

    path: str = Field(min_length=1)
    label: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    max_size: Optional[int] = Field(default=None, ge=0, description="Advisory byte bound.")
    allowed_extensions: list[str] = Field(default_factory=list)
    json_schema: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    handler: Optional[str] = Field(default=None, description="Registered handler identifier.")
    requires: list[str] = Field(
        default_factory=list,
        description="Other asset paths whose content is passed to the handler.",
    )

    @field_validator("allowed_extensions")
    def _normalize(cls, value: list[str]) -> list[str]:
        return _normalize_extensions(value)

    @field_validator("handler")
    def _blank_handler(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    def to_manifest_dict(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not payload.get("requires"):
            payload.pop("requires", None)
        return payload


class JsonAsset(_AssetBase):
    type: Literal["json"]


class TextAsset(_AssetBase):
    type: Literal["text"]


class ImageAsset(_AssetBase):
    type: Literal["image"]


class DirectoryAsset(_AssetBase):
    type: Literal["directory"]
    contains: Annotated[
        Union[ComboContains, FlatContains, None],
        Field(default=None, union_mode="left_to_right"),
    ]

    @property
    def directory(self) -> str:
        return self.path.rstrip("/")

    def file_path(self, filename: str) -> str:
        return f"{self.directory}/{filename}"


AssetDescriptor = Annotated[
    Union[JsonAsset, TextAsset, ImageAsset, DirectoryAsset],
    Field(discriminator="type"),
]

ASSET_ADAPTER: TypeAdapter[Any] = TypeAdapter(AssetDescriptor)


def parse_asset(data: dict[str, Any]) -> JsonAsset | TextAsset | ImageAsset | DirectoryAsset:
    """Validate a single manifest entry."""
    return ASSET_ADAPTER.validate_python(data)


class Manifest(BaseModel):
    """Declarative list of assets driving a page load."""

    model_config = ConfigDict(extra="allow")

    assets: list[AssetDescriptor] = Field(default_factory=list)

    def find(self, path: str) -> JsonAsset | TextAsset | ImageAsset | DirectoryAsset | None:
        for asset in self.assets:
            if asset.path == path:
                return asset
        return None

    def duplicate_paths(self) -> list[str]:
        counts = Counter(asset.path for asset in self.assets)
        return [path for path, count in counts.items() if count > 1]

    def upsert(self, asset: JsonAsset | TextAsset | ImageAsset | DirectoryAsset) -> bool:
        """Insert ``asset`` or overwrite the entry with the same path.

        Returns ``True`` when an existing entry was replaced.
        """
        for index, existing in enumerate(self.assets):
            if existing.path == asset.path:
                self.assets[index] = asset
                return True
        self.assets.append(asset)
        return False

    def to_manifest_dict(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", exclude={"assets"})
        payload["assets"] = [asset.to_manifest_dict() for asset in self.assets]
        return payload
