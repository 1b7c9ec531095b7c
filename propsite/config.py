from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_FILENAME = "propsite.yml"

DiscoveryStrategyName = Literal["index-file", "server-listing"]


class FetchConfig(BaseModel):
    """Options controlling how asset bodies are requested."""

    parallel: bool = Field(
        default=False,
        description=(
            "Fan out all asset fetches concurrently. Results are still committed to the "
            "content store in manifest order and handlers only run after every fetch completes."
        ),
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Client timeout in seconds applied to every request.",
    )


class DiscoveryConfig(BaseModel):
    """Configuration for directory listing discovery."""

    strategies: list[DiscoveryStrategyName] = Field(
        default_factory=lambda: ["index-file", "server-listing"],
        description="Ordered listing strategies; the first one that answers wins.",
    )
    index_filename: str = Field(
        default="directory-index.json",
        description="Filename of the explicit directory index written by 'propsite index'.",
    )

    @field_validator("strategies")
    def _require_strategy(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("At least one discovery strategy must be configured.")
        return value

    @field_validator("index_filename")
    def _plain_filename(cls, value: str) -> str:
        text = value.strip()
        if not text or "/" in text:
            raise ValueError("index_filename must be a bare filename.")
        return text


class Config(BaseModel):
    project_name: str = Field(default="Property Site")
    site_dir: Path = Field(default=Path("."))
    base_url: str | None = Field(
        default=None,
        description="Load from this live site instead of site_dir (e.g. 'https://example.com/').",
    )
    manifest_path: str = Field(
        default="site-assets.json",
        description="Manifest location relative to the site root.",
    )
    page_template: str = Field(
        default="index.html",
        description="Page document (relative to the site root) that handlers populate.",
    )
    output_path: Path = Field(default=Path("dist/index.html"))
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)

    @field_validator("site_dir", "output_path", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("base_url", mode="before")
    def _normalize_base_url(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        if not text:
            return None
        if not text.endswith("/"):
            text = f"{text}/"
        return text

    @field_validator("manifest_path", "page_template")
    def _strip_leading_slash(cls, value: str) -> str:
        return value.lstrip("/")

    @property
    def manifest_file(self) -> Path:
        return self.site_dir / self.manifest_path

    @property
    def page_file(self) -> Path:
        return self.site_dir / self.page_template


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/site/propsite.yml``) or a
    directory containing that file. All relative paths inside the configuration
    are interpreted relative to the directory holding the config file.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    base_dir: Path
    if candidate.is_dir():
        # A bare site directory without a config file uses defaults anchored there.
        config_file = candidate / DEFAULT_CONFIG_FILENAME
        if config_file.exists():
            data = _read_yaml(config_file)
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        data = _read_yaml(candidate)
        base_dir = candidate.parent.resolve()

    cfg = Config(**data)

    def _abs_required(value: Path) -> Path:
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.site_dir = _abs_required(cfg.site_dir)
    cfg.output_path = _abs_required(cfg.output_path)
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must define a mapping.")
    return data
