"""Static registry mapping handler identifiers to render functions."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any, overload

from ..page import Page

Handler = Callable[[Any, str, Page, Mapping[str, Any]], None]
"""``handler(data, asset_path, page, related)``; ``data`` is ``None`` when the asset has no content."""


def normalize_handler_id(reference: str) -> str:
    """Reduce a manifest handler reference to its registry identifier.

    ``handlers/hero-image.js``, ``hero_image`` and ``Hero-Image`` all map to ``hero-image``.
    """
    name = reference.strip().replace("\\", "/").rsplit("/", 1)[-1]
    for suffix in (".js", ".mjs", ".py"):
        if name.lower().endswith(suffix):
            name = name[: -len(suffix)]
            break
    return name.lower().replace("_", "-")


class HandlerRegistry:
    """Identifier -> handler lookup populated at startup."""

    def __init__(self, handlers: Mapping[str, Handler] | None = None) -> None:
        self._handlers: dict[str, Handler] = {}
        for name, handler in (handlers or {}).items():
            self.add(name, handler)

    def add(self, name: str, handler: Handler) -> None:
        key = normalize_handler_id(name)
        if not key:
            raise ValueError("Handler identifier must not be empty.")
        self._handlers[key] = handler

    @overload
    def register(self, name: str) -> Callable[[Handler], Handler]: ...

    @overload
    def register(self, name: str, handler: Handler) -> Handler: ...

    def register(self, name: str, handler: Handler | None = None) -> Any:
        """Register ``handler`` under ``name``; usable as a decorator."""
        if handler is not None:
            self.add(name, handler)
            return handler

        def decorator(func: Handler) -> Handler:
            self.add(name, func)
            return func

        return decorator

    def get(self, reference: str) -> Handler | None:
        return self._handlers.get(normalize_handler_id(reference))

    def __contains__(self, reference: object) -> bool:
        return isinstance(reference, str) and self.get(reference) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._handlers))

    def __len__(self) -> int:
        return len(self._handlers)

    def copy(self) -> "HandlerRegistry":
        return HandlerRegistry(self._handlers)


BUILTIN_HANDLERS = HandlerRegistry()


def register(name: str) -> Callable[[Handler], Handler]:
    """Decorator registering a built-in handler."""
    return BUILTIN_HANDLERS.register(name)
