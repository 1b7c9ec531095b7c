"""CLI entrypoints for propsite authoring and rendering."""

import asyncio
import json
import logging
import webbrowser
from pathlib import Path
from typing import Annotated, Any, cast

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import DEFAULT_CONFIG_FILENAME, Config, load_config
from .loader import LoadContext, PageTemplateError, load_site
from .manifest import ComboContains, ComboPart, FlatContains, ManifestLoadError
from .manifest.models import AssetType, normalize_extension
from .preview_server import bound_address, make_request_handler, serve as serve_site
from .scaffold import (
    PropertyDetails,
    ScaffoldError,
    ScaffoldResult,
    build_asset,
    default_extensions,
    default_label,
    default_max_size,
    detect_file_type,
    handler_stub,
    init_site,
    register_asset,
    suggest_schema,
    write_directory_indexes,
)
from .schema import (
    SchemaGenerationError,
    default_schema_output,
    generate_schema as infer_file_schema,
    schema_source_path,
)
from .validation import AssetIssue, IssueSeverity, lint_site

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="Property site asset toolkit.")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file or site directory."),
]
YesFlag = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Accept defaults instead of prompting."),
]

ASSET_TYPES: tuple[str, ...] = ("json", "text", "image", "directory")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """Property site asset toolkit."""
    _configure_logging(verbose)


@app.command()
def render(
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the rendered page here instead of output_path."),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Load from a live site instead of site_dir."),
    ] = None,
) -> None:
    """Load every manifest asset, run handlers, and write the populated page."""
    config: Config = _load(config_path)

    try:
        context = asyncio.run(load_site(config, base_url=base_url))
    except ManifestLoadError as exc:
        console.print(f"[bold red]Manifest failed to load[/]: {exc}")
        raise typer.Exit(code=1) from exc
    except PageTemplateError as exc:
        console.print(f"[bold red]Page unavailable[/]: {exc}")
        raise typer.Exit(code=1) from exc

    target = output or config.output_path
    context.page.write(target)
    _print_render_summary(context)
    console.print(f"[bold green]Page written[/]: {_display_path(target)}")


@app.command()
def serve(
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
    host: Annotated[
        str,
        typer.Option("--host", help="Host interface to bind the preview server."),
    ] = "127.0.0.1",
    port: Annotated[
        int,
        typer.Option("--port", "-p", help="Port for the preview server."),
    ] = 8000,
    open_browser: Annotated[
        bool,
        typer.Option(
            "--open-browser/--no-open-browser",
            help="Automatically open the site in a browser after starting.",
        ),
    ] = False,
) -> None:
    """Serve the site directory (with directory listings) over HTTP."""
    config: Config = _load(config_path)
    if port < 0 or port > 65535:
        raise typer.BadParameter("Port must be between 0 and 65535.")

    site_dir = config.site_dir
    if not site_dir.is_dir():
        console.print(f"[bold red]Site directory not found[/]: {site_dir}")
        raise typer.Exit(code=1)
    if not config.manifest_file.exists():
        console.print(
            "[bold yellow]Warning[/]: "
            f"{config.manifest_path} not found. Run 'propsite add-asset' to create it."
        )

    handler = make_request_handler(site_dir)
    try:
        with serve_site(host, port, handler) as server:
            bound_host, bound_port = bound_address(server)
            url_host = "127.0.0.1" if bound_host in {"0.0.0.0", ""} else bound_host
            site_url = f"http://{url_host}:{bound_port}/"
            console.print(
                f"[bold green]Preview server[/]: serving {site_dir} at {site_url} "
                "(press Ctrl+C to stop)"
            )
            if open_browser:
                webbrowser.open(site_url)
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                console.print("\n[bold yellow]Stopping preview server...[/]")
    except OSError as exc:
        console.print(f"[bold red]Failed to start preview server[/]: {exc}")
        raise typer.Exit(code=1) from exc


@app.command("add-asset")
def add_asset(  # noqa: PLR0913
    path: Annotated[
        str | None,
        typer.Argument(help="Asset path relative to the site root (e.g. content/contact.json)."),
    ] = None,
    asset_type: Annotated[
        str | None,
        typer.Option("--type", "-t", help="Asset type: json, text, image, or directory."),
    ] = None,
    label: Annotated[str | None, typer.Option("--label", help="Display label.")] = None,
    description: Annotated[str | None, typer.Option("--description", help="Short description.")] = None,
    max_size: Annotated[int | None, typer.Option("--max-size", help="Maximum size in bytes.")] = None,
    extensions: Annotated[
        str | None,
        typer.Option("--extensions", help="Comma-separated allowed extensions."),
    ] = None,
    handler: Annotated[str | None, typer.Option("--handler", help="Handler id to invoke.")] = None,
    requires: Annotated[
        str | None,
        typer.Option("--requires", help="Comma-separated asset paths handed to the handler."),
    ] = None,
    schema_file: Annotated[
        Path | None,
        typer.Option("--schema-file", help="JSON Schema file to embed (json assets only)."),
    ] = None,
    contains: Annotated[
        str | None,
        typer.Option(
            "--contains",
            help="Directory contents: 'flat' or 'combo' (combo pairs image, json, and text parts).",
        ),
    ] = None,
    yes: YesFlag = False,
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
) -> None:
    """Register a new asset in the manifest and create a starter file."""
    config: Config = _load(config_path)

    if path is None:
        if yes:
            raise typer.BadParameter("PATH is required with --yes.")
        path = typer.prompt("File path (relative to the site root)")
    path = path.strip()

    detected = detect_file_type(path)
    if asset_type is None:
        fallback = detected if detected != "unknown" else "directory"
        asset_type = fallback if yes else typer.prompt("Asset type", default=fallback)
    asset_type = asset_type.strip().lower()
    if asset_type not in ASSET_TYPES:
        raise typer.BadParameter(f"Asset type must be one of: {', '.join(ASSET_TYPES)}.")

    if label is None:
        label = default_label(path) if yes else typer.prompt("Label", default=default_label(path))
    if description is None:
        description = "" if yes else typer.prompt("Description", default="", show_default=False)
    if max_size is None:
        default_size = default_max_size(asset_type)
        max_size = default_size if yes else typer.prompt("Maximum size (bytes)", default=default_size, type=int)

    allowed = _parse_extensions(extensions) if extensions is not None else None
    if allowed is None and not yes and asset_type != "directory":
        answer = typer.prompt(
            "Allowed extensions (comma-separated)",
            default=", ".join(default_extensions(asset_type)),
        )
        allowed = _parse_extensions(answer)

    schema: dict[str, Any] | None = None
    if asset_type == "json":
        schema = _schema_option(schema_file, path, yes)

    contains_model = None
    if asset_type == "directory":
        contains_model = _contains_option(contains, yes)

    try:
        asset = build_asset(
            path,
            cast(AssetType, asset_type),
            label=label,
            description=description,
            max_size=max_size,
            allowed_extensions=allowed,
            schema=schema,
            handler=handler,
            requires=_parse_paths(requires) if requires is not None else None,
            contains=contains_model,
        )
        result = register_asset(config, asset)
    except (ScaffoldError, ManifestLoadError) as exc:
        console.print(f"[bold red]Cannot add asset[/]: {exc}")
        raise typer.Exit(code=1) from exc

    _print_scaffold_summary(f"asset '{asset.path}'", result)
    if asset.type in {"json", "text"}:
        console.print("[bold blue]Handler stub[/]:")
        console.print(handler_stub(asset), markup=False, highlight=False, soft_wrap=True)


@app.command()
def init(  # noqa: PLR0913
    address: Annotated[str | None, typer.Option("--address", help="Street address.")] = None,
    location: Annotated[str | None, typer.Option("--location", help="City, state, and ZIP.")] = None,
    price: Annotated[str | None, typer.Option("--price", help="Listing price.")] = None,
    zillow_url: Annotated[str | None, typer.Option("--zillow-url", help="Zillow listing URL.")] = None,
    bedrooms: Annotated[str | None, typer.Option("--bedrooms")] = None,
    bathrooms: Annotated[str | None, typer.Option("--bathrooms")] = None,
    square_feet: Annotated[str | None, typer.Option("--square-feet")] = None,
    lot_size: Annotated[str | None, typer.Option("--lot-size")] = None,
    hero_title: Annotated[str | None, typer.Option("--hero-title")] = None,
    hero_subtitle: Annotated[str | None, typer.Option("--hero-subtitle")] = None,
    yes: YesFlag = False,
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
) -> None:
    """Write starter property, hero, and summary content for a new listing."""
    config: Config = _load(config_path)
    defaults = PropertyDetails(address="", location="", price="")

    def ask(value: str | None, prompt: str, default: str | None = None) -> str:
        if value is not None:
            return value
        if yes:
            return default or ""
        if default is None:
            return typer.prompt(prompt)
        return typer.prompt(prompt, default=default, show_default=bool(default))

    details = PropertyDetails(
        address=ask(address, "Property address"),
        location=ask(location, "City, State ZIP"),
        price=ask(price, "Price (e.g. $500,000)"),
        zillow_url=ask(zillow_url, "Zillow URL", ""),
        bedrooms=ask(bedrooms, "Bedrooms", defaults.bedrooms),
        bathrooms=ask(bathrooms, "Bathrooms", defaults.bathrooms),
        square_feet=ask(square_feet, "Square feet", ""),
        lot_size=ask(lot_size, "Lot size", ""),
        hero_title=ask(hero_title, "Hero title", defaults.hero_title),
        hero_subtitle=ask(hero_subtitle, "Hero subtitle", defaults.hero_subtitle),
    )

    try:
        result = init_site(config, details)
    except ScaffoldError as exc:
        console.print(f"[bold red]Cannot initialise site[/]: {exc}")
        raise typer.Exit(code=1) from exc

    _print_scaffold_summary(f"property '{details.address}'", result)


@app.command("generate-schema")
def generate_schema(
    path: Annotated[str, typer.Argument(help="JSON file to infer a schema from.")],
    output: Annotated[
        Path | None,
        typer.Argument(help="Where to write the schema (default: <name>-schema.json)."),
    ] = None,
    stdout: Annotated[
        bool,
        typer.Option("--stdout", help="Print the schema instead of writing a file."),
    ] = False,
) -> None:
    """Infer a JSON Schema from an existing JSON file."""
    source = schema_source_path(path)
    try:
        schema = infer_file_schema(source)
    except SchemaGenerationError as exc:
        console.print(f"[bold red]Schema generation failed[/]: {exc}")
        raise typer.Exit(code=1) from exc

    rendered = json.dumps(schema, indent=2, ensure_ascii=False)
    if stdout:
        console.print_json(rendered)
        return

    target = output or default_schema_output(source)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(rendered + "\n", encoding="utf-8")
    console.print(f"[bold green]Schema written[/]: {_display_path(target)}")


@app.command()
def index(config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME) -> None:
    """Write explicit directory index files for every listed directory asset."""
    config: Config = _load(config_path)
    try:
        result = write_directory_indexes(config)
    except ManifestLoadError as exc:
        console.print(f"[bold red]Manifest failed to load[/]: {exc}")
        raise typer.Exit(code=1) from exc

    if not result.created and not result.updated and not result.notes:
        console.print("[bold yellow]Nothing to index[/]: no directory assets declare contents.")
        return
    _print_scaffold_summary("directory indexes", result)


@app.command()
def lint(
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
) -> None:
    """Check the manifest and the content files it references."""
    config: Config = _load(config_path)
    report = lint_site(config)

    if not report.issues:
        console.print(f"[bold green]Lint clean[/]: {report.asset_count} asset(s), no issues detected.")
        raise typer.Exit()

    for issue in sorted(report.issues, key=_lint_sort_key):
        style = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        location = issue.asset_path
        if issue.pointer:
            location = f"{location} :: {issue.pointer}"
        console.print(f"[bold {style}]{issue.severity.name}[/] {location} - {issue.message}")

    console.print(
        f"[bold blue]Summary[/]: {report.error_count} error(s), {report.warning_count} warning(s) "
        f"across {report.asset_count} asset(s)."
    )

    exit_code = 0
    if report.error_count > 0 or (strict and report.warning_count > 0):
        exit_code = 1
    raise typer.Exit(code=exit_code)


def _print_render_summary(context: LoadContext) -> None:
    total = len(context.manifest.assets)
    console.print(f"[bold green]Assets loaded[/]: {len(context.store)} of {total}")
    missing = [asset.path for asset in context.manifest.assets if asset.path not in context.store]
    if missing:
        console.print("[bold yellow]Missing content[/]:")
        for path in missing:
            console.print(f"- {path}")

    report = context.dispatch
    console.print(f"[bold green]Handlers run[/]: {len(report.invoked)}")
    for path in report.missing:
        console.print(f"[bold yellow]Handler not registered[/]: {path}")
    for path in report.failed:
        console.print(f"[bold red]Handler failed[/]: {path}")

    console.print(f"[bold blue]Lightbox[/]: {len(context.lightbox.images)} image(s)")


def _print_scaffold_summary(subject: str, result: ScaffoldResult) -> None:
    console.print(f"[bold green]Scaffold ready[/]: {subject}")

    for path in result.created:
        console.print(f"- {_display_path(path)} (new)")
    for path in result.updated:
        console.print(f"- {_display_path(path)} (updated)")

    if result.notes:
        console.print("[bold blue]Next steps[/]:")
        for note in result.notes:
            console.print(f"- {note}")


def _parse_extensions(raw: str) -> list[str]:
    return [normalize_extension(item) for item in raw.split(",") if item.strip()]


def _parse_paths(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _schema_option(schema_file: Path | None, path: str, yes: bool) -> dict[str, Any] | None:
    if schema_file is not None:
        try:
            return json.loads(schema_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise typer.BadParameter(f"Cannot read schema file {schema_file}: {exc}") from exc

    suggested = suggest_schema(path)
    if suggested is None or yes:
        return suggested
    if typer.confirm("Use the suggested schema for this file?", default=True):
        return suggested
    return None


def _contains_option(contains: str | None, yes: bool) -> ComboContains | FlatContains | None:
    if contains is None and not yes:
        contains = typer.prompt("Directory contents (flat, combo, none)", default="flat")
    choice = (contains or "none").strip().lower()
    if choice == "flat":
        return FlatContains(type="image", allowed_extensions=default_extensions("image"))
    if choice == "combo":
        return ComboContains(
            type="combo",
            parts=[
                ComboPart(asset_type=part, allowed_extensions=default_extensions(part))
                for part in ("image", "json", "text")
            ],
        )
    if choice == "none":
        return None
    raise typer.BadParameter("Directory contents must be 'flat', 'combo', or 'none'.")


def _lint_sort_key(issue: AssetIssue) -> tuple[int, str, str]:
    severity_order = 0 if issue.severity is IssueSeverity.ERROR else 1
    pointer = issue.pointer or ""
    return (severity_order, issue.asset_path, pointer)


def _display_path(path: Path) -> str:
    try:
        return path.relative_to(Path.cwd()).as_posix()
    except ValueError:
        return path.as_posix()


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("propsite")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=err_console, show_path=False))


def _load(path: str) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


if __name__ == "__main__":
    app()
