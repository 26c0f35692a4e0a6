"""Block scanner - buffers raw template tokens up to a closing tag.

Jinja's own token stream is too fine grained (and too lossy) to reproduce
template text, so the scanner works on tag-level tokens built from the raw
lexer output of :meth:`jinja2.Environment.lex`. Joining the ``text`` of every
token gives back the lexed source.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from jinja2 import Environment

from liquidlab.exceptions import UnterminatedBlockError

# opening lexer token -> closing lexer token, with the kind of tag-level token
_GROUPS = {
    "block_begin": ("block_end", "tag"),
    "variable_begin": ("variable_end", "output"),
    "comment_begin": ("comment_end", "comment"),
}
_RAW_TAGS = {"raw_begin": "raw", "raw_end": "endraw"}


@dataclass
class Token:
    """One tag, output expression, comment or run of literal text."""

    kind: str  # "data", "tag", "output" or "comment"
    text: str
    lineno: int = 1
    name: str | None = None  # tag name, tags only
    args: str = ""  # raw text between the tag name and the closing delimiter
    begin: str = "{%"
    end: str = "%}"

    def get_text(self) -> str:
        return self.text


class TokenStream:
    """Forward-only stream; reading a token removes it."""

    def __init__(self, tokens: Iterable[Token] = ()):
        self._tokens: deque[Token] = deque(tokens)
        self.last: Token | None = None

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        if not self._tokens:
            raise StopIteration
        self.last = self._tokens.popleft()
        return self.last

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def exhausted(self) -> bool:
        return not self._tokens


def _make_tag(parts: list[tuple[int, str, str]]) -> Token:
    lineno = parts[0][0]
    text = "".join(value for _, _, value in parts)
    begin, end = parts[0][2], parts[-1][2]
    name = None
    args: list[str] = []
    for _, kind, value in parts[1:-1]:
        if name is None:
            if kind == "name":
                name = value
            continue
        args.append(value)
    return Token(
        kind="tag",
        text=text,
        lineno=lineno,
        name=name,
        args="".join(args).strip(),
        begin=begin,
        end=end,
    )


def tokenize(
    environment: Environment,
    source: str,
    name: str | None = None,
    filename: str | None = None,
) -> TokenStream:
    """Split template source into tag-level tokens."""
    tokens: list[Token] = []
    group: list[tuple[int, str, str]] = []
    closer: str | None = None
    kind = "data"

    for lineno, lex_kind, value in environment.lex(source, name, filename):
        if closer is None:
            if lex_kind in _GROUPS:
                closer, kind = _GROUPS[lex_kind]
                group = [(lineno, lex_kind, value)]
            elif lex_kind in _RAW_TAGS:
                tokens.append(
                    Token(kind="tag", text=value, lineno=lineno, name=_RAW_TAGS[lex_kind])
                )
            else:
                tokens.append(Token(kind="data", text=value, lineno=lineno))
            continue

        group.append((lineno, lex_kind, value))
        if lex_kind != closer:
            continue
        if kind == "tag":
            tokens.append(_make_tag(group))
        else:
            tokens.append(
                Token(kind=kind, text="".join(v for _, _, v in group), lineno=group[0][0])
            )
        closer = None

    return TokenStream(tokens)


def scan_block(stream: TokenStream, end_name: str, opening: Token) -> list[Token]:
    """Consume tokens up to the first tag named ``end_name``.

    The end tag itself is consumed but not returned. Nesting is not tracked:
    the first matching end tag closes the block.

    Raises:
        UnterminatedBlockError: If the stream runs out first.
    """
    tokens: list[Token] = []
    for token in stream:
        if token.name == end_name:
            return tokens
        tokens.append(token)
    raise UnterminatedBlockError(opening.get_text(), opening.lineno)


def reconstitute(tokens: Iterable[Token]) -> str:
    """Turn buffered tokens back into template text."""
    return "".join(token.get_text() for token in tokens)
