"""Render handlers and the dispatcher that invokes them."""

from . import facts, gallery, hero, listing, summary  # noqa: F401 - registers built-ins
from .dispatcher import DispatchReport, dispatch_handlers
from .registry import BUILTIN_HANDLERS, Handler, HandlerRegistry, normalize_handler_id, register


def default_registry() -> HandlerRegistry:
    """Return a fresh registry holding every built-in handler."""
    return BUILTIN_HANDLERS.copy()


__all__ = [
    "DispatchReport",
    "Handler",
    "HandlerRegistry",
    "default_registry",
    "dispatch_handlers",
    "normalize_handler_id",
    "register",
]
