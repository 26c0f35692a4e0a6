"""Section data, identifiers and schema extraction for the section tag."""

from __future__ import annotations

import json
import logging
import random
import re
import string
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from liquidlab.filters import handleize

log = logging.getLogger(__name__)

SCHEMA_RE = re.compile(
    r'<script id="schema" type="application/json">(.*?)</script>', re.DOTALL
)

_ID_CHARS = string.ascii_lowercase + string.digits


def random_id(length: int = 9) -> str:
    """Generate a short random base-36 identifier.

    Only used to tell sections and blocks apart within one render, so
    collisions are unlikely enough and no cryptographic source is needed.
    """
    return "".join(random.choices(_ID_CHARS, k=length))


def find_section_data(template: str, search_paths: Iterable[Path]) -> Path | None:
    """Return the first ``<dir>/<template>.json`` that exists."""
    for directory in search_paths:
        candidate = Path(directory) / f"{template}.json"
        if candidate.is_file():
            return candidate
    return None


def stamp_section_ids(data: dict[str, Any]) -> dict[str, Any]:
    """Give ``section`` and each of its ``blocks`` a fresh ``id``.

    Returns a new mapping; everything else passes through unchanged.
    """
    section = data.get("section") if isinstance(data, dict) else None
    if not isinstance(section, dict):
        return data

    blocks = section.get("blocks") or []
    return {
        **data,
        "section": {
            **section,
            "id": random_id(),
            "blocks": [{**block, "id": random_id()} for block in blocks],
        },
    }


def load_section_data(template: str, search_paths: Iterable[Path]) -> dict[str, Any]:
    """Load a section's JSON sidecar and stamp fresh identifiers on it.

    A missing sidecar is not an error; the section just gets no data.
    """
    path = find_section_data(template, search_paths)
    if path is None:
        log.debug("No section data for '%s'", template)
        return {}

    log.debug("Loading section data for '%s' from %s", template, path)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        return {}
    return stamp_section_ids(data)


def extract_schema(output: str) -> dict[str, Any] | None:
    """Parse the JSON of the first schema block in rendered output."""
    m = SCHEMA_RE.search(output)
    if not m or not m.group(1).strip():
        return None
    return json.loads(m.group(1))


def wrap_section(output: str, schema: dict[str, Any]) -> str:
    """Wrap rendered section markup in its container div."""
    slug = handleize(str(schema["name"]))
    css_class = schema.get("class")
    classes = f"shopify-section {css_class}" if css_class else "shopify-section"
    return f'<div id="shopify-section-{slug}" class="{classes}">{output}</div>'
