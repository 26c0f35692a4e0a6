"""Liquid-flavoured pattern engine built on Jinja2.

One ``LiquidEngine`` owns one configured Jinja environment. Configure it with
``use_config`` (or by passing the config to the constructor) before rendering:
tags, filters and the section search path are fixed at that point and only
read afterwards.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

from liquidlab import partials as matchers
from liquidlab.config import PatternLabConfig
from liquidlab.exceptions import ConfigError
from liquidlab.extension import LiquidTagExtension
from liquidlab.filters import FILTERS
from liquidlab.tags import (
    FormTag,
    JavascriptTag,
    PaginateTag,
    PlainSectionTag,
    SchemaTag,
    SectionTag,
    StylesheetTag,
    Tag,
)

log = logging.getLogger(__name__)

GLOBAL_DATA_FILE = "data.json"
META_FILES = ("_head.liquid", "_foot.liquid")
META_TEMPLATES_DIR = Path(__file__).parent / "templates" / "_meta"


@dataclass(frozen=True)
class Profile:
    """Tags, filters and default section behaviour of one feature set."""

    tags: tuple[type[Tag], ...]
    filters: tuple[str, ...]
    section_mode: str


PROFILES: dict[str, Profile] = {
    "shopify": Profile(
        tags=(FormTag, PaginateTag, SchemaTag, StylesheetTag, JavascriptTag),
        filters=("asset_url", "img_url", "handle", "money"),
        section_mode="wrapped",
    ),
    "basic": Profile(
        tags=(SchemaTag,),
        filters=("asset_url",),
        section_mode="plain",
    ),
}

SECTION_TAGS: dict[str, type[Tag]] = {
    "wrapped": SectionTag,
    "plain": PlainSectionTag,
}


def get_directories(source: Path) -> list[Path]:
    return sorted(p for p in source.iterdir() if p.is_dir())


def discover_search_paths(patterns_dir: Path) -> list[Path]:
    """Top-level pattern directories, then each of their subdirectories."""
    root_directories = get_directories(patterns_dir)
    all_paths = list(root_directories)
    for directory in root_directories:
        all_paths.extend(get_directories(directory))
    return all_paths


def create_environment(
    search_paths: list[Path] | None = None,
    pattern_extension: str = "liquid",
    profile: str = "shopify",
    section_mode: str | None = None,
    globals: dict[str, Any] | None = None,
) -> Environment:
    """Create a Jinja2 Environment with the tags and filters of ``profile``.

    Returns:
        Configured async Environment.
    """
    search_paths = list(search_paths or [])
    features = PROFILES[profile]

    env = Environment(
        loader=FileSystemLoader([str(p) for p in search_paths]),
        extensions=[LiquidTagExtension],
        enable_async=True,
        keep_trailing_newline=True,
    )
    env.section_paths = search_paths  # type: ignore[attr-defined]
    env.pattern_extension = pattern_extension  # type: ignore[attr-defined]

    registry = env.tag_registry  # type: ignore[attr-defined]
    registry.register_many(features.tags)
    registry.register(SECTION_TAGS[section_mode or features.section_mode])

    for name in features.filters:
        env.filters[name] = FILTERS[name]

    env.globals.update(globals or {})
    return env


class LiquidEngine:
    """Pattern engine: renders templates and finds partial references."""

    engine_name = "liquid"
    engine_file_extension = [".liquid", ".html"]
    is_async = True

    # regexes, compiled once at import
    find_partials_re = matchers.PARTIALS_RE
    find_partials_with_style_modifiers_re = matchers.PARTIALS_WITH_STYLE_MODIFIERS_RE
    find_partials_with_pattern_parameters_re = matchers.PARTIALS_WITH_PATTERN_PARAMETERS_RE
    find_list_items_re = matchers.LIST_ITEMS_RE
    find_partial_re = matchers.PARTIAL_KEY_RE

    def __init__(self, config: PatternLabConfig | None = None, root: Path | None = None):
        self.config: PatternLabConfig | None = None
        self.root = Path(root) if root else Path.cwd()
        self.search_paths: list[Path] = []
        self.global_data_path: Path | None = None
        self.global_data: dict[str, Any] = {}
        self.environment = create_environment(globals={"is_patternlab": True})

        if config is not None:
            self.use_config(config, root)

    # -------------------------------------------------------------------------
    # setup
    # -------------------------------------------------------------------------

    def use_config(self, config: PatternLabConfig, root: Path | None = None) -> None:
        """Configure the engine from a pattern lab config.

        Must run before any render. Paths in the config are resolved against
        ``root`` (default: current directory).
        """
        self.config = config
        if root is not None:
            self.root = Path(root)

        patterns_dir = self.root / config.paths.source.patterns
        if not patterns_dir.is_dir():
            raise ConfigError(f"Patterns directory not found: {patterns_dir}")

        self.search_paths = discover_search_paths(patterns_dir)
        log.debug("Template search path: %s", [str(p) for p in self.search_paths])

        self.global_data_path = self.root / config.paths.source.data / GLOBAL_DATA_FILE
        self.global_data = self._load_global_data()

        options = config.engine
        self.environment = create_environment(
            search_paths=self.search_paths,
            pattern_extension=config.pattern_extension,
            profile=options.profile,
            section_mode=options.section_mode,
            globals={**self.global_data, "is_patternlab": True},
        )
        log.info(
            "Configured %s engine (profile=%s, section_mode=%s)",
            self.engine_name,
            options.profile,
            options.section_mode or PROFILES[options.profile].section_mode,
        )

    def _load_global_data(self) -> dict[str, Any]:
        if self.global_data_path is None:
            return {}
        if not self.global_data_path.is_file():
            log.warning("Global data file not found: %s", self.global_data_path)
            return {}
        return json.loads(self.global_data_path.read_text(encoding="utf-8"))

    # -------------------------------------------------------------------------
    # _meta head/foot
    # -------------------------------------------------------------------------

    def spawn_file(self, config: PatternLabConfig, file_name: str) -> Path:
        """Copy the default ``file_name`` into the meta directory if it is missing.

        An existing file is never overwritten.

        Returns:
            Path of the meta file.
        """
        if config.paths.source.meta is None:
            raise ConfigError("paths.source.meta is not set")

        meta_file = self.root / config.paths.source.meta / file_name
        if meta_file.exists():
            return meta_file

        meta_file.parent.mkdir(parents=True, exist_ok=True)
        meta_file.write_text(
            (META_TEMPLATES_DIR / file_name).read_text(encoding="utf-8"), encoding="utf-8"
        )
        log.info("Spawned %s", meta_file)
        return meta_file

    def spawn_meta(self, config: PatternLabConfig) -> list[Path]:
        """Make sure the meta directory has the engine's head and foot files."""
        return [self.spawn_file(config, name) for name in META_FILES]

    # -------------------------------------------------------------------------
    # rendering
    # -------------------------------------------------------------------------

    async def render_pattern(
        self,
        pattern: Any,
        data: dict[str, Any] | None = None,
        partials: Any = None,
    ) -> str | None:
        """Render a pattern's template with global data and ``data``.

        Any failure is logged and ``None`` is returned instead of raising.
        """
        try:
            global_data = self._load_global_data()

            source = matchers.template_text(pattern)
            if source is None:
                raise TypeError(f"Pattern has no template text: {pattern!r}")

            template = self.environment.from_string(source)
            return await template.render_async(
                {**global_data, "is_patternlab": True, **(data or {})}
            )
        except Exception:
            log.exception("Failed to render pattern")
            return None

    # -------------------------------------------------------------------------
    # partial references
    # -------------------------------------------------------------------------

    def pattern_matcher(self, pattern: Any, regex: re.Pattern[str]) -> list[str]:
        return matchers.pattern_matcher(pattern, regex)

    def find_partials(self, pattern: Any) -> list[str]:
        return matchers.find_partials(pattern)

    def find_partials_with_style_modifiers(self, pattern: Any) -> list[str]:
        return matchers.find_partials_with_style_modifiers(pattern)

    def find_partials_with_pattern_parameters(self, pattern: Any) -> list[str]:
        return matchers.find_partials_with_pattern_parameters(pattern)

    def find_list_items(self, pattern: Any) -> list[str]:
        return matchers.find_list_items(pattern)

    def find_partial(self, partial_string: str) -> str:
        return matchers.find_partial(partial_string)

    def find_partial_new(self, partial_string: str) -> str:
        return matchers.find_partial_new(partial_string)
