"""liquidlab exceptions

Errors raised while configuring the engine, scanning template blocks and
rendering the custom tags.
"""

from __future__ import annotations


class LiquidLabError(Exception):
    """Base exception for all liquidlab errors."""

    exit_code: int = 1


class ConfigError(LiquidLabError):
    """Raised when the pattern lab configuration cannot be loaded."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnterminatedBlockError(LiquidLabError):
    """Raised when a block tag reaches the end of the template unclosed."""

    def __init__(self, tag_text: str, lineno: int | None = None):
        self.tag_text = tag_text
        self.lineno = lineno
        message = f"tag {tag_text} not closed"
        if lineno is not None:
            message = f"{message} (line {lineno})"
        super().__init__(message)


class UnknownTagError(LiquidLabError):
    """Raised when a compiled template calls a tag that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"tag '{name}' is not registered")


class UnknownProcessorError(LiquidLabError):
    """Raised when a stylesheet names a processor with no pipeline."""

    def __init__(self, processor: str):
        self.processor = processor
        super().__init__(f"processor for {processor} not found")


class SectionSchemaError(LiquidLabError):
    """Raised when a rendered section carries no schema block."""

    def __init__(self, template: str):
        self.template = template
        super().__init__(f"section '{template}' rendered without a schema block")


class SectionNameError(LiquidLabError):
    """Raised when a section tag cannot resolve a template name."""

    def __init__(self, argument: str, reason: str = "cannot include with empty filename"):
        self.argument = argument
        super().__init__(f"{reason}: {argument!r}")
