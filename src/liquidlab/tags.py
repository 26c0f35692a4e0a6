"""Custom block tags: form, paginate, schema, stylesheet, javascript, section.

Every tag follows the same two-phase contract:

* ``Tag.parse`` runs when a template is compiled. It receives the opening tag
  token and the remaining token stream, buffers the tag body with the block
  scanner and handles the tag's own arguments in ``setup``.
* ``Tag.render`` runs once per render with the current Jinja context. Tags
  never interpret their bodies themselves; when a body needs evaluating it
  is handed back to the environment as a fresh template.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import ClassVar

import sass
from jinja2 import Environment
from jinja2.runtime import Context

from liquidlab.exceptions import (
    SectionNameError,
    SectionSchemaError,
    UnknownProcessorError,
)
from liquidlab.scanner import Token, TokenStream, reconstitute, scan_block
from liquidlab.section import extract_schema, load_section_data, wrap_section

log = logging.getLogger(__name__)

QUOTED_RE = re.compile(r"""^(?:'[^']*'|"[^"]*")$""")


def unquote(value: str) -> str | None:
    """Strip matching quotes, or return None if ``value`` is not quoted."""
    value = value.strip()
    if QUOTED_RE.match(value):
        return value[1:-1]
    return None


class Tag(ABC):
    """Base class for a custom tag occurrence."""

    name: ClassVar[str] = ""
    has_body: ClassVar[bool] = True

    def __init__(
        self,
        environment: Environment,
        args: str = "",
        tokens: list[Token] | None = None,
    ):
        self.environment = environment
        self.args = args.strip()
        self.tokens: list[Token] = list(tokens or [])
        self.setup()

    @classmethod
    def parse(cls, environment: Environment, opening: Token, stream: TokenStream) -> Tag:
        """Build a tag from its opening token, consuming its body from ``stream``."""
        tokens = scan_block(stream, f"end{cls.name}", opening) if cls.has_body else []
        return cls(environment, opening.args, tokens)

    @classmethod
    def from_source(cls, environment: Environment, args: str, content: str) -> Tag:
        """Rebuild a tag from its argument string and reconstituted body."""
        tokens = [Token(kind="data", text=content)] if content else []
        return cls(environment, args, tokens)

    def setup(self) -> None:
        """Handle tag-specific arguments. Called once per instance."""

    @property
    def content(self) -> str:
        return reconstitute(self.tokens)

    async def render_text(self, source: str, context: Context) -> str:
        return await self.environment.from_string(source).render_async(context.get_all())

    async def render_content(self, context: Context) -> str:
        return await self.render_text(self.content, context)

    @abstractmethod
    async def render(self, context: Context) -> str:
        """Produce this tag's output."""
        ...


# =============================================================================
# form
# =============================================================================

_FORM_CLASS_RE = re.compile(r"""class:\s?(['"])(.+?)\1""")
_DATA_ATTRIBUTE_RE = re.compile(r"""(data-[\w-]+):\s*(?:(['"])(.*?)\2|([^\s,'"]+))?""")


@dataclass(frozen=True)
class FormAttribute:
    """A ``data-*`` attribute given to the form tag."""

    attribute: str
    value: str = ""
    variable: bool = False  # value is an expression, not a literal

    def markup(self) -> str:
        if not self.value:
            return self.attribute
        if self.variable:
            return f'{self.attribute}="{{{{ {self.value} }}}}"'
        return f'{self.attribute}="{self.value}"'


class FormTag(Tag):
    """``{% form 'product', class: 'x', data-id: product.id %}...{% endform %}``"""

    name = "form"

    def setup(self) -> None:
        m = _FORM_CLASS_RE.search(self.args)
        self.form_class: str | None = m.group(2) if m else None

        self.attributes: list[FormAttribute] = []
        for m in _DATA_ATTRIBUTE_RE.finditer(self.args):
            if m.group(2):
                self.attributes.append(FormAttribute(m.group(1), m.group(3)))
            elif m.group(4):
                self.attributes.append(FormAttribute(m.group(1), m.group(4), variable=True))
            else:
                self.attributes.append(FormAttribute(m.group(1)))

    async def render(self, context: Context) -> str:
        content = await self.render_content(context)

        attributes = "".join(f" {attr.markup()}" for attr in self.attributes)
        opening = f'<form class="{self.form_class or ""}"{attributes}>'
        if any(attr.variable for attr in self.attributes):
            opening = await self.render_text(opening, context)

        return f"{opening}{content}</form>"


# =============================================================================
# paginate, schema, javascript
# =============================================================================


class PaginateTag(Tag):
    """Renders its body unchanged; only marks the paginated region."""

    name = "paginate"

    async def render(self, context: Context) -> str:
        return await self.render_content(context)


class SchemaTag(Tag):
    name = "schema"

    async def render(self, context: Context) -> str:
        return f'<script id="schema" type="application/json">{self.content}</script>'


class JavascriptTag(Tag):
    name = "javascript"

    async def render(self, context: Context) -> str:
        return f"<script>{self.content}</script>"


# =============================================================================
# stylesheet
# =============================================================================

Pipeline = Callable[[str], Awaitable[str]]


async def identity_pipeline(text: str) -> str:
    return text


async def sass_pipeline(text: str) -> str:
    """Compile SCSS with libsass off the event loop."""
    return await asyncio.to_thread(sass.compile, string=text)


PIPELINES: dict[str, Pipeline] = {
    "": identity_pipeline,
    "sass": sass_pipeline,
    "scss": sass_pipeline,
}


class StylesheetTag(Tag):
    """``{% stylesheet 'scss' %}...{% endstylesheet %}``"""

    name = "stylesheet"

    def setup(self) -> None:
        self.processor = self.args

    async def resolve_processor(self, context: Context) -> str:
        template = unquote(self.processor)
        if template is None:
            return ""
        return await self.render_text(template, context)

    async def render(self, context: Context) -> str:
        processor = await self.resolve_processor(context)
        pipeline = PIPELINES.get(processor)
        if pipeline is None:
            raise UnknownProcessorError(processor)

        log.debug("Running stylesheet through the '%s' pipeline", processor)
        text = await self.render_content(context)
        css = await pipeline(text)
        return f"<style>{css}</style>"


# =============================================================================
# section
# =============================================================================


class SectionTag(Tag):
    """Renders a section template and wraps it using its embedded schema.

    ``{% section 'header' %}`` renders ``header.<pattern_extension>`` with the
    data from ``header.json`` (if any), reads the ``{% schema %}`` block from
    the output and wraps everything in a ``shopify-section`` div.
    """

    name = "section"
    has_body = False

    def setup(self) -> None:
        # name is checked here so an unquoted section fails at compile time
        template = unquote(self.args)
        if template is None:
            raise SectionNameError(self.args, "section name must be a quoted string")
        self.template = template

    @property
    def filename(self) -> str:
        return f"{self.template}.{self.environment.pattern_extension}"  # type: ignore[attr-defined]

    async def render(self, context: Context) -> str:
        section_data = load_section_data(
            self.template,
            self.environment.section_paths,  # type: ignore[attr-defined]
        )
        template = self.environment.get_template(self.filename)
        output = await template.render_async(section_data)

        schema = extract_schema(output)
        if not schema or not schema.get("name"):
            raise SectionSchemaError(self.template)
        return wrap_section(output, schema)


class PlainSectionTag(Tag):
    """Renders a section template as-is, without schema or wrapper.

    The name argument is itself rendered against the context first, so
    ``{% section '{{ kind }}-hero' %}`` and ``{% section hero_name %}`` work.
    """

    name = "section"
    has_body = False

    def setup(self) -> None:
        self.namestr = self.args

    async def resolve_name(self, context: Context) -> str:
        source = unquote(self.namestr)
        if source is None:
            source = f"{{{{ {self.namestr} }}}}" if self.namestr else ""
        return (await self.render_text(source, context)).strip()

    async def render(self, context: Context) -> str:
        template = await self.resolve_name(context)
        if not template:
            raise SectionNameError(self.namestr)

        path = PurePosixPath(template)
        if path.suffix:
            filename = template
            template = str(path.with_suffix(""))
        else:
            filename = f"{template}.{self.environment.pattern_extension}"  # type: ignore[attr-defined]

        data = load_section_data(template, self.environment.section_paths)  # type: ignore[attr-defined]
        variant = self.environment.get_template(filename)
        return await variant.render_async({**context.get_all(), **data})
