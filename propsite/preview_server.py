"""Local preview server for a site directory.

``SimpleHTTPRequestHandler`` answers directory URLs with an anchor listing,
which is what server-listing discovery parses, so a site previewed here
behaves like one deployed behind a stock static host.
"""

from __future__ import annotations

import contextlib
import threading
from dataclasses import dataclass
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Iterator

from .transport import CONTENT_TYPES


class _ThreadingHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True


def make_request_handler(directory: Path) -> type[SimpleHTTPRequestHandler]:
    """Create a request handler rooted at ``directory`` with site MIME types."""
    directory_path = str(directory)

    class PreviewRequestHandler(SimpleHTTPRequestHandler):
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            super().__init__(*args, directory=directory_path, **kwargs)

        extensions_map = dict(SimpleHTTPRequestHandler.extensions_map)
        extensions_map.update(CONTENT_TYPES)

    return PreviewRequestHandler


@contextlib.contextmanager
def serve(
    host: str,
    port: int,
    handler: type[SimpleHTTPRequestHandler],
) -> Iterator[ThreadingHTTPServer]:
    """Context manager that creates and cleans up the HTTP server."""
    server = _ThreadingHTTPServer((host, port), handler)
    try:
        yield server
    finally:
        try:
            server.shutdown()
        finally:
            server.server_close()


@dataclass(slots=True)
class PreviewServerHandle:
    server: ThreadingHTTPServer
    thread: threading.Thread
    host: str
    port: int

    @property
    def url(self) -> str:
        host = "127.0.0.1" if self.host in {"0.0.0.0", ""} else self.host
        return f"http://{host}:{self.port}/"


def bound_address(server: ThreadingHTTPServer) -> tuple[str, int]:
    raw_host = server.server_address[0]
    host = raw_host.decode("utf-8", "ignore") if isinstance(raw_host, bytes) else str(raw_host)
    return host, int(server.server_address[1])


def start_preview(
    directory: Path,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    max_attempts: int = 20,
) -> PreviewServerHandle:
    """Start the preview server in a background thread.

    Tries ``port`` and increments until a free port is found, up to ``max_attempts``.
    Returns a handle that can be passed to ``stop_preview``.
    """
    handler = make_request_handler(directory.resolve())

    last_exc: OSError | None = None
    for attempt in range(max_attempts + 1):
        try:
            server = _ThreadingHTTPServer((host, port + attempt if port else 0), handler)
        except OSError as exc:  # port busy or permission error
            last_exc = exc
            continue
        bound_host, bound_port = bound_address(server)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        return PreviewServerHandle(server=server, thread=thread, host=bound_host, port=bound_port)

    if last_exc:
        raise last_exc
    raise OSError("Unable to bind preview server to the requested port range")


def stop_preview(handle: PreviewServerHandle | None) -> None:
    """Stop a running preview server started by ``start_preview``."""
    if handle is None:
        return
    try:
        handle.server.shutdown()
    finally:
        handle.server.server_close()
    if handle.thread.is_alive():
        handle.thread.join(timeout=2.0)
