from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

PAGE_HTML = """<!DOCTYPE html>
<html>
<head><title>Listing</title></head>
<body>
<section class="hero">
  <img id="hero-img" src="placeholder.jpg" alt="">
  <h1 class="hero-title">Title</h1>
  <p class="hero-subtitle">Subtitle</p>
</section>
<section class="listing">
  <p class="address"></p>
  <p class="location"></p>
  <p class="price"></p>
  <a class="zillow-link" href="#">Zillow</a>
  <a class="contact-zillow" href="#">Contact</a>
  <div class="detail-item"><span class="detail-label">Bedrooms</span><span class="detail-value"></span></div>
  <div class="detail-item"><span class="detail-label">Square Feet</span><span class="detail-value"></span></div>
  <div class="detail-item"><span class="detail-label">Year Built</span><span class="detail-value">old</span></div>
</section>
<section class="summary"><div class="container"><p>Loading...</p></div></section>
<section class="facts">
  <ul id="interior-facts"></ul>
  <ul id="property-facts"></ul>
  <ul id="construction-facts"></ul>
  <ul id="financial-facts"></ul>
</section>
<section class="gallery"><div id="gallery-grid"></div></section>
</body>
</html>
"""

MANIFEST: dict[str, Any] = {
    "assets": [
        {
            "path": "assets/hero.jpg",
            "type": "image",
            "label": "Hero Image",
            "handler": "hero-image",
            "allowedExtensions": [".jpg"],
            "maxSize": 2097152,
        },
        {
            "path": "content/hero-description.json",
            "type": "json",
            "handler": "hero-description",
        },
        {
            "path": "content/property.json",
            "type": "json",
            "handler": "handlers/property.js",
            "schema": {
                "type": "object",
                "required": ["address", "price"],
                "properties": {
                    "address": {"type": "string"},
                    "price": {"type": "string"},
                },
            },
        },
        {"path": "content/facts.json", "type": "json", "handler": "facts"},
        {"path": "content/summary.md", "type": "text", "handler": "summary"},
        {"path": "content/image-descriptions.json", "type": "json"},
        {
            "path": "assets/gallery/",
            "type": "directory",
            "handler": "gallery",
            "requires": ["content/image-descriptions.json"],
            "contains": {"type": "image", "allowedExtensions": [".jpg", ".png"]},
        },
    ]
}

SUMMARY_MD = """# Welcome Home

Intro with **bold** text.

## Highlights

### Location
Close to *everything*.

### Yard
Big and green.

---

Book a viewing today!

\U0001F4F8 Photos available on request.
"""


def write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A complete single-property site on disk."""
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text(PAGE_HTML, encoding="utf-8")
    write_json(root / "site-assets.json", MANIFEST)

    (root / "assets" / "gallery" / "sub").mkdir(parents=True)
    (root / "assets" / "hero.jpg").write_bytes(b"\xff\xd8hero")
    (root / "assets" / "gallery" / "a.jpg").write_bytes(b"\xff\xd8a")
    (root / "assets" / "gallery" / "b.png").write_bytes(b"\x89PNGb")
    (root / "assets" / "gallery" / "notes.txt").write_text("skip me", encoding="utf-8")

    content = root / "content"
    write_json(
        content / "hero-description.json",
        {"alt": "Front of the house", "title": "Lovely Home", "subtitle": "Move-in ready"},
    )
    write_json(
        content / "property.json",
        {
            "address": "123 Main St",
            "location": "Springfield, IL 62701",
            "price": "$450,000",
            "zillowUrl": "https://www.zillow.com/homedetails/123",
            "details": {"bedrooms": 3, "squareFeet": "1,850"},
        },
    )
    write_json(
        content / "facts.json",
        {
            "interior": [{"label": "Heating", "value": "Forced air"}],
            "financial": [{"label": "Tax", "value": "$3,100"}],
        },
    )
    (content / "summary.md").write_text(SUMMARY_MD, encoding="utf-8")
    write_json(
        content / "image-descriptions.json",
        {"a.jpg": {"alt": "Kitchen"}, "b.png": "Backyard"},
    )
    return root


@pytest.fixture
def config_file(site_dir: Path) -> Path:
    path = site_dir / "propsite.yml"
    path.write_text(
        "project_name: Test Listing\nsite_dir: .\noutput_path: dist/index.html\n",
        encoding="utf-8",
    )
    return path
