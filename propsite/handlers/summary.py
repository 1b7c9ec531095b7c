"""Summary section rendered from a small Markdown dialect.

Line rules: ``#`` becomes an ``h2`` and ``##`` an ``h3``. ``###`` opens a
highlight card in a ``highlights-grid`` and the plain lines that follow
become its description. A ``---`` rule closes any open card and marks the
next paragraph as the footer. Lines starting with a camera or house emoji
become ``summary-note`` paragraphs. Inline Markdown inside paragraphs is
rendered with markdown-it.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from bs4 import Tag
from markdown_it import MarkdownIt

from ..page import Page
from .registry import register

NOTE_MARKERS = ("\U0001F4F8", "\U0001F3E1")


@lru_cache(maxsize=1)
def _renderer() -> MarkdownIt:
    return MarkdownIt("commonmark", {"html": False})


def render_inline(text: str) -> str:
    return _renderer().renderInline(text)


@register("summary")
def handle_summary(data: Any, asset_path: str, page: Page, related: Mapping[str, Any]) -> None:
    if not isinstance(data, str) or not data:
        return

    container = page.select_one(".summary .container")
    if container is None:
        return
    container.clear()

    current: Tag | None = None
    highlights: Tag | None = None
    after_rule = False

    for raw in data.splitlines():
        line = raw.strip()
        if not line:
            continue

        if line.startswith("# "):
            container.append(_text_tag(page, "h2", line[2:]))
            current = None
            after_rule = False
        elif line.startswith("## "):
            container.append(_text_tag(page, "h3", line[3:]))
            current = None
            after_rule = False
        elif line.startswith("### "):
            if highlights is None:
                highlights = page.new_tag("div", **{"class": "highlights-grid"})
                container.append(highlights)
            current = page.new_tag("div", **{"class": "highlight-item"})
            current.append(_text_tag(page, "h4", line[4:]))
            highlights.append(current)
            after_rule = False
        elif line == "---":
            current = None
            after_rule = True
        elif line.startswith(NOTE_MARKERS):
            container.append(_inline_tag(page, "p", line, "summary-note"))
            current = None
            after_rule = False
        elif current is not None:
            current.append(_inline_tag(page, "p", line))
        else:
            css_class = "summary-footer" if after_rule else None
            container.append(_inline_tag(page, "p", line, css_class))
            after_rule = False


def _text_tag(page: Page, name: str, text: str) -> Tag:
    tag = page.new_tag(name)
    tag.string = text
    return tag


def _inline_tag(page: Page, name: str, text: str, css_class: str | None = None) -> Tag:
    tag = page.new_tag(name, **({"class": css_class} if css_class else {}))
    tag.append(page.fragment(render_inline(text)))
    return tag
