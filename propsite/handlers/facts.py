"""Facts & features lists."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..page import Page
from .registry import register

FACT_SECTIONS: dict[str, str] = {
    "interior": "interior-facts",
    "property": "property-facts",
    "construction": "construction-facts",
    "financial": "financial-facts",
}


@register("facts")
def handle_facts(data: Any, asset_path: str, page: Page, related: Mapping[str, Any]) -> None:
    if not isinstance(data, Mapping):
        return

    for key, element_id in FACT_SECTIONS.items():
        facts = data.get(key)
        target = page.by_id(element_id)
        if target is None or not isinstance(facts, list):
            continue
        target.clear()
        for fact in facts:
            if not isinstance(fact, Mapping):
                continue
            item = page.new_tag("li")
            strong = page.new_tag("strong")
            strong.string = f"{fact.get('label', '')}:"
            item.append(strong)
            item.append(f" {fact.get('value', '')}")
            target.append(item)
