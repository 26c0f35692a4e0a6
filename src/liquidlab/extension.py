"""Jinja2 extension that hosts the liquidlab tags."""

from __future__ import annotations

import logging

from jinja2 import Environment, nodes
from jinja2.ext import Extension
from jinja2.parser import Parser
from jinja2.runtime import Context

from liquidlab.exceptions import UnknownTagError
from liquidlab.registry import TagRegistry
from liquidlab.scanner import Token, TokenStream, tokenize
from liquidlab.tags import Tag

log = logging.getLogger(__name__)


class LiquidTagExtension(Extension):
    """Extension for the registered block tags, e.g. {% form %}...{% endform %}.

    Tag bodies have to reach the tags as raw text, which Jinja's parser does
    not keep. So the work is split in two:

    1. ``preprocess`` tokenizes the template source, lets each registered tag
       consume its body with the block scanner, and rewrites the whole
       occurrence into one self-contained tag holding the raw argument string
       and the body as string literals::

           {% javascript %}console.log(1){% endjavascript %}
           ->  {% javascript '', 'console.log(1)' %}

    2. ``parse`` turns that tag into a call to ``_render_tag``, which
       rebuilds the tag instance and awaits its ``render`` on every render.
       The context passed along is derived from the current frame, so loop
       variables, ``with`` bindings and macro arguments reach tag bodies.

    Line numbers are kept by padding the rewritten tag with the newlines the
    original occurrence spanned.
    """

    def __init__(self, environment: Environment):
        super().__init__(environment)
        # Filled in by the engine during setup, before any template is loaded.
        # These are runtime attributes, not part of Environment's type definition
        environment.extend(
            tag_registry=TagRegistry(),
            section_paths=[],
            pattern_extension="liquid",
        )

    @property
    def tags(self) -> set[str]:  # type: ignore[override]
        return set(self.registry.names())

    @property
    def registry(self) -> TagRegistry:
        return self.environment.tag_registry  # type: ignore[attr-defined]

    def preprocess(self, source: str, name: str | None, filename: str | None = None) -> str:
        """Buffer every registered tag's body and rewrite it into a call tag."""
        names = self.registry.names()
        if not any(tag_name in source for tag_name in names):
            return source

        stream = tokenize(self.environment, source, name, filename)
        parts: list[str] = []
        for token in stream:
            tag_cls = self.registry.get(token.name) if token.kind == "tag" else None
            if tag_cls is None:
                parts.append(token.get_text())
                continue

            tag = tag_cls.parse(self.environment, token, stream)
            end = stream.last if tag.has_body else None
            parts.append(self._lower(tag, token, end))

        return "".join(parts)

    @staticmethod
    def _lower(tag: Tag, opening: Token, end: Token | None) -> str:
        newlines = opening.get_text().count("\n") - opening.end.count("\n")
        newlines += tag.content.count("\n")
        if end is not None:
            newlines += end.get_text().count("\n")
        padding = "\n" * newlines
        return (
            f"{opening.begin} {tag.name} {tag.args!r}, {tag.content!r}"
            f"{padding} {opening.end}"
        )

    def parse(self, parser: Parser) -> nodes.Node:
        """Parse a rewritten ``{% name 'args', 'content' %}`` tag."""
        token = next(parser.stream)
        lineno = token.lineno

        args = parser.parse_expression()
        parser.stream.expect("comma")
        content = parser.parse_expression()

        call = self.call_method(
            "_render_tag",
            [nodes.Const(token.value), args, content, nodes.DerivedContextReference()],
            lineno=lineno,
        )
        return nodes.Output([call]).set_lineno(lineno)

    async def _render_tag(self, name: str, args: str, content: str, context: Context) -> str:
        """Called at render time with the tag's raw arguments and body."""
        tag_cls = self.registry.get(name)
        if tag_cls is None:
            raise UnknownTagError(name)

        tag = tag_cls.from_source(self.environment, args, content)
        return await tag.render(context)
