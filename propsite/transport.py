"""HTTP client construction and an in-process transport over a local site directory."""

from __future__ import annotations

import html
import logging
import mimetypes
from pathlib import Path
from urllib.parse import quote

import httpx

from .config import Config

logger = logging.getLogger(__name__)

LOCAL_BASE_URL = "http://site.local/"

# Content types for common static assets, shared with the preview server.
CONTENT_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".md": "text/markdown; charset=utf-8",
    ".txt": "text/plain; charset=utf-8",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".json": "application/json; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}


def guess_content_type(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in CONTENT_TYPES:
        return CONTENT_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or "application/octet-stream"


def render_directory_listing(directory: Path, url_path: str) -> str:
    """Render an anchor-per-entry index page like a stock static file server.

    Subdirectories are linked with a trailing slash.
    """
    title = f"Directory listing for {html.escape(url_path)}"
    lines = [
        "<!DOCTYPE HTML>",
        "<html>",
        f"<head><meta charset=\"utf-8\"><title>{title}</title></head>",
        "<body>",
        f"<h1>{title}</h1>",
        "<hr>",
        "<ul>",
    ]
    for entry in sorted(directory.iterdir(), key=lambda item: item.name.lower()):
        name = entry.name + ("/" if entry.is_dir() else "")
        lines.append(f"<li><a href=\"{quote(name)}\">{html.escape(name)}</a></li>")
    lines.extend(["</ul>", "<hr>", "</body>", "</html>", ""])
    return "\n".join(lines)


class StaticSiteTransport(httpx.AsyncBaseTransport):
    """Serve GET requests from ``root`` without a network round trip.

    Directory URLs answer with an HTML listing when ``listings`` is enabled,
    mirroring what the preview server returns, and 403 otherwise.
    """

    def __init__(self, root: Path, *, listings: bool = True) -> None:
        self.root = Path(root).resolve()
        self.listings = listings

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if request.method not in {"GET", "HEAD"}:
            return httpx.Response(405, request=request)

        url_path = request.url.path
        target = (self.root / url_path.lstrip("/")).resolve()
        try:
            target.relative_to(self.root)
        except ValueError:
            return httpx.Response(403, request=request)

        if target.is_dir():
            if not self.listings:
                return httpx.Response(403, request=request)
            body = render_directory_listing(target, url_path or "/")
            return httpx.Response(
                200,
                headers={"Content-Type": "text/html; charset=utf-8"},
                content=body.encode("utf-8"),
                request=request,
            )

        if not target.is_file():
            return httpx.Response(404, request=request)

        try:
            content = target.read_bytes()
        except OSError as exc:
            logger.warning("Failed to read %s: %s", target, exc)
            return httpx.Response(500, request=request)
        return httpx.Response(
            200,
            headers={"Content-Type": guess_content_type(target)},
            content=content,
            request=request,
        )


def create_client(
    config: Config,
    *,
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the client used for every read during a page load.

    ``base_url`` (or ``config.base_url``) targets a live site; otherwise requests
    are answered from ``config.site_dir``. An explicit ``transport`` replaces both.
    """
    target = base_url or config.base_url
    timeout = httpx.Timeout(config.fetch.timeout)
    if transport is not None:
        return httpx.AsyncClient(base_url=target or LOCAL_BASE_URL, transport=transport, timeout=timeout)
    if target:
        if not target.endswith("/"):
            target = f"{target}/"
        return httpx.AsyncClient(base_url=target, timeout=timeout, follow_redirects=True)
    return httpx.AsyncClient(
        base_url=LOCAL_BASE_URL,
        transport=StaticSiteTransport(config.site_dir),
        timeout=timeout,
    )
