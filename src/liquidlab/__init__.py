"""liquidlab - Liquid-style tags and partial matchers for pattern libraries"""

from liquidlab._version import __version__
from liquidlab.config import EngineOptions, PatternLabConfig
from liquidlab.engine import LiquidEngine, create_environment
from liquidlab.exceptions import (
    ConfigError,
    LiquidLabError,
    SectionNameError,
    SectionSchemaError,
    UnknownProcessorError,
    UnknownTagError,
    UnterminatedBlockError,
)
from liquidlab.registry import TagRegistry

__all__ = [
    "__version__",
    # engine
    "LiquidEngine",
    "create_environment",
    "TagRegistry",
    # config
    "EngineOptions",
    "PatternLabConfig",
    # errors
    "ConfigError",
    "LiquidLabError",
    "SectionNameError",
    "SectionSchemaError",
    "UnknownProcessorError",
    "UnknownTagError",
    "UnterminatedBlockError",
]
