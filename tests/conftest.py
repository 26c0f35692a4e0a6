"""Shared fixtures: an on-disk pattern tree and engines configured on it."""

import json
from pathlib import Path

import pytest

from liquidlab import LiquidEngine, PatternLabConfig

HEADER_TEMPLATE = (
    '<header id="{{ section.id }}"><h1>{{ section.settings.title }}</h1>'
    "{% for block in section.blocks %}"
    '<a data-block="{{ block.id }}">{{ block.type }}</a>'
    "{% endfor %}</header>"
    '{% schema %}{"name": "Site Header", "class": "header-wrapper"}{% endschema %}'
)

HEADER_DATA = {
    "section": {
        "settings": {"title": "Hello"},
        "blocks": [{"type": "link"}, {"type": "logo"}],
    }
}

FOOTER_TEMPLATE = (
    "<footer>{{ site_name }}</footer>"
    '{% schema %}{"name": "Footer"}{% endschema %}'
)


@pytest.fixture
def pattern_root(tmp_path: Path) -> Path:
    """A project with source/_patterns/{atoms,sections} and global data."""
    patterns = tmp_path / "source" / "_patterns"
    sections = patterns / "sections"
    sections.mkdir(parents=True)
    (patterns / "atoms").mkdir()

    (sections / "header.liquid").write_text(HEADER_TEMPLATE)
    (sections / "header.json").write_text(json.dumps(HEADER_DATA))
    # no sidecar: renders with empty section data
    (sections / "footer.liquid").write_text(FOOTER_TEMPLATE)
    # no schema block
    (sections / "bare.liquid").write_text("<p>no schema here</p>")

    data_dir = tmp_path / "source" / "_data"
    data_dir.mkdir(parents=True)
    (data_dir / "data.json").write_text(json.dumps({"site_name": "Demo Store"}))

    return tmp_path


def _config(**engine_options) -> PatternLabConfig:
    return PatternLabConfig.model_validate(
        {
            "paths": {
                "source": {
                    "patterns": "source/_patterns",
                    "data": "source/_data",
                }
            },
            "patternExtension": "liquid",
            "liquidlab": engine_options,
        }
    )


@pytest.fixture
def make_engine(pattern_root: Path):
    """Factory for engines configured on ``pattern_root``."""

    def _make(**engine_options) -> LiquidEngine:
        return LiquidEngine(_config(**engine_options), root=pattern_root)

    return _make


@pytest.fixture
def engine(make_engine) -> LiquidEngine:
    return make_engine()


@pytest.fixture
def make_config():
    """Factory for configs pointing at source/_patterns and source/_data."""
    return _config
