"""Configuration parsing for patternlab-config.json / .yaml"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from liquidlab.exceptions import ConfigError

# =============================================================================
# Paths
# =============================================================================


class SourcePaths(BaseModel):
    """Source directories, relative to the project root"""

    patterns: Path
    data: Path
    meta: Path | None = None

    model_config = {"extra": "allow"}


class PathsConfig(BaseModel):
    source: SourcePaths

    model_config = {"extra": "allow"}


# =============================================================================
# Engine options
# =============================================================================


class EngineOptions(BaseModel):
    """Feature set of the engine.

    profile:
        ``shopify`` - form, paginate, schema, stylesheet, javascript and
        section tags with all four filters; sections are wrapped.
        ``basic`` - schema and section tags with ``asset_url`` only;
        sections are rendered plain.
    section_mode:
        ``wrapped`` or ``plain``, overrides the profile's section behaviour.
    """

    profile: Literal["shopify", "basic"] = "shopify"
    section_mode: Literal["wrapped", "plain"] | None = Field(
        default=None, alias="sectionMode"
    )

    model_config = {"populate_by_name": True}


# =============================================================================
# Main config
# =============================================================================


class PatternLabConfig(BaseModel):
    """The parts of the pattern lab config this engine reads"""

    paths: PathsConfig
    pattern_extension: str = Field(default="liquid", alias="patternExtension")
    engine: EngineOptions = Field(default_factory=EngineOptions, alias="liquidlab")

    model_config = {"populate_by_name": True, "extra": "allow"}

    @classmethod
    def load(cls, path: Path) -> "PatternLabConfig":
        """Load config from a JSON or YAML file"""
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config {path}: {e}") from e
