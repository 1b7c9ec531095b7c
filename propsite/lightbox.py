"""Lightbox state over the gallery images currently rendered on the page."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .page import Page

GALLERY_IMAGE_SELECTOR = ".gallery-item img"


class LightboxState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


@dataclass(slots=True)
class Lightbox:
    """Full-screen viewer with circular next/previous navigation."""

    images: list[str] = field(default_factory=list)
    index: int = 0
    state: LightboxState = LightboxState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state is LightboxState.OPEN

    @property
    def current_image(self) -> str | None:
        if not self.images:
            return None
        return self.images[self.index]

    @property
    def counter(self) -> str:
        if not self.images:
            return ""
        return f"{self.index + 1} / {len(self.images)}"

    def rescan(self, page: Page) -> list[str]:
        """Refresh the image list from the page without changing state."""
        self.images = [
            str(img["src"]) for img in page.select(GALLERY_IMAGE_SELECTOR) if img.get("src")
        ]
        if not self.images:
            self.index = 0
        elif self.index >= len(self.images):
            self.index = len(self.images) - 1
        return self.images

    def select(self, target: str | int) -> bool:
        """Open on the image with the given ``src`` or position.

        Returns ``False`` without changing state when the target is not rendered.
        """
        if isinstance(target, int):
            if not 0 <= target < len(self.images):
                return False
            position = target
        else:
            try:
                position = self.images.index(target)
            except ValueError:
                return False
        self.index = position
        self.state = LightboxState.OPEN
        return True

    def next(self) -> None:
        if self.is_open and self.images:
            self.index = (self.index + 1) % len(self.images)

    def prev(self) -> None:
        if self.is_open and self.images:
            self.index = (self.index - 1 + len(self.images)) % len(self.images)

    def close(self) -> None:
        self.state = LightboxState.CLOSED

    def click_outside(self) -> None:
        self.close()

    def handle_key(self, key: str) -> None:
        if not self.is_open:
            return
        if key == "Escape":
            self.close()
        elif key == "ArrowLeft":
            self.prev()
        elif key == "ArrowRight":
            self.next()
