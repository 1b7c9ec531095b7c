"""Property listing handler: address, price, external links and key details."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..page import Page
from .registry import register

# Detail label text (substring match) -> key in the property ``details`` object.
DETAIL_LABELS: tuple[tuple[str, str], ...] = (
    ("Bedrooms", "bedrooms"),
    ("Bathrooms", "bathrooms"),
    ("Square Feet", "squareFeet"),
    ("Lot Size", "lotSize"),
    ("Year Built", "yearBuilt"),
    ("Price/sqft", "pricePerSqft"),
)


@register("property")
def handle_property(data: Any, asset_path: str, page: Page, related: Mapping[str, Any]) -> None:
    if not isinstance(data, Mapping):
        return

    for selector, key in ((".address", "address"), (".location", "location"), (".price", "price")):
        element = page.select_one(selector)
        if element is not None and data.get(key):
            element.string = str(data[key])

    zillow_url = data.get("zillowUrl")
    if zillow_url:
        for link in page.select(".zillow-link, .contact-zillow"):
            link["href"] = str(zillow_url)

    details = data.get("details")
    if isinstance(details, Mapping):
        _fill_details(page, details)


def _fill_details(page: Page, details: Mapping[str, Any]) -> None:
    for item in page.select(".detail-item"):
        label = item.select_one(".detail-label")
        value = item.select_one(".detail-value")
        if label is None or value is None:
            continue
        label_text = label.get_text().strip()
        for needle, key in DETAIL_LABELS:
            if needle in label_text:
                raw = details.get(key)
                value.string = "" if raw in (None, "") else str(raw)
                break
