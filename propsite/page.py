"""Page document that handlers populate."""

from __future__ import annotations

from pathlib import Path

from bs4 import BeautifulSoup, Tag


class Page:
    """A parsed HTML page exposing the lookups handlers rely on."""

    def __init__(self, html: str) -> None:
        self.soup = BeautifulSoup(html, "html.parser")

    @classmethod
    def from_file(cls, path: Path) -> "Page":
        return cls(path.read_text(encoding="utf-8"))

    def by_id(self, element_id: str) -> Tag | None:
        found = self.soup.find(id=element_id)
        return found if isinstance(found, Tag) else None

    def select_one(self, selector: str) -> Tag | None:
        return self.soup.select_one(selector)

    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def new_tag(self, name: str, **attrs: str) -> Tag:
        return self.soup.new_tag(name, attrs=attrs)

    def fragment(self, html: str) -> BeautifulSoup:
        """Parse an HTML snippet for insertion into this page."""
        return BeautifulSoup(html, "html.parser")

    def render(self) -> str:
        return str(self.soup)

    def write(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(), encoding="utf-8")
        return path
