"""Lexical block rules: strings, single-line comments and multi-line comments.

A rule only knows how to recognise where its block begins and ends. Strings
are recognised so that comment markers inside literals are skipped; they are
never emitted.
"""

from enum import Enum
from typing import Iterator, NamedTuple

from pydantic import BaseModel, ConfigDict

from api_doc_extractor.lang.lexer import Lexer
from api_doc_extractor.message import ApidocError


class BlockKind(str, Enum):
    STRING = "string"
    SINGLE_COMMENT = "single-comment"
    MULTI_COMMENT = "multi-comment"


class UnterminatedBlock(ApidocError):
    """End of file reached before the closing token of a block."""


class ScannedBlock(NamedTuple):
    line: int
    data: str
    raw: str


class BlockRule(BaseModel):
    """One lexical rule of a language.

    ``escape`` is the escape token for strings. For comments it is the set of
    leading noise characters removed from every line, e.g. the ``*`` column
    of a ``/** ... */`` block.

    With ``line_start`` both tokens only match at the beginning of a line,
    as for Perl POD and Ruby ``=begin`` blocks.
    """

    model_config = ConfigDict(frozen=True)

    kind: BlockKind
    begin: str
    end: str = ""
    escape: str = ""
    line_start: bool = False

    def begin_func(self, lexer: Lexer) -> bool:
        if self.line_start and not lexer.at_line_start():
            return False
        return lexer.match(self.begin)

    def end_func(self, lexer: Lexer) -> list[str]:
        """Consume the rest of the block and return its filtered lines.

        Raises ``UnterminatedBlock`` when the end token is never found.
        """
        if self.kind is BlockKind.STRING:
            return self._end_string(lexer)
        if self.kind is BlockKind.SINGLE_COMMENT:
            return self._end_single_comments(lexer)
        return self._end_multi_comment(lexer)

    def _end_string(self, lexer: Lexer) -> list[str]:
        while True:
            if lexer.at_eof():
                raise UnterminatedBlock(f"unterminated string, missing {self.end!r}")
            if self.escape and lexer.match(self.escape):
                lexer.pos += 1
            elif lexer.match(self.end):
                return []
            else:
                lexer.pos += 1

    def _end_single_comments(self, lexer: Lexer) -> list[str]:
        data = lexer.data
        lines = []
        while True:
            start = lexer.pos
            end = data.find("\n", start)
            if end < 0:
                lexer.pos = len(data)
                lines.append(filter_symbols(data[start:], self.escape))
                break

            lexer.pos = end + 1
            lines.append(filter_symbols(data[start:lexer.pos], self.escape))

            lexer.skip_space()
            if not lexer.match(self.begin):
                # hand the newline back to the lexer
                lexer.pos = end
                break
        return lines

    def _end_multi_comment(self, lexer: Lexer) -> list[str]:
        data = lexer.data
        lines = []
        start = lexer.pos
        while True:
            if lexer.at_eof():
                raise UnterminatedBlock(f"unterminated comment, missing {self.end!r}")
            if (not self.line_start or lexer.at_line_start()) and lexer.match(self.end):
                stop = lexer.pos - len(self.end)
                if stop > start:
                    lines.append(filter_symbols(data[start:stop], self.escape))
                return lines

            ch = data[lexer.pos]
            lexer.pos += 1
            if ch == "\n":
                lines.append(filter_symbols(data[start:lexer.pos], self.escape))
                start = lexer.pos


def filter_symbols(line: str, charset: str) -> str:
    """Strip one leading noise marker from ``line``.

    Leading non-newline whitespace is skipped. If the first other character
    is in ``charset`` it is removed together with that whitespace and with
    one following space; a marker followed by a newline collapses the line to
    ``"\\n"``.
    """
    if not charset:
        return line

    for index, ch in enumerate(line):
        if ch != "\n" and ch.isspace():
            continue

        if ch not in charset:
            return line

        rest = line[index + 1:]
        if rest.startswith("\n"):
            return "\n"
        if rest[:1] in (" ", "\t"):
            return rest[1:]
        return rest

    return line


def scan(data: str, rules: list[BlockRule]) -> Iterator[ScannedBlock]:
    """Yield every comment block of ``data`` in source order.

    Rules are tried in order at each position and the first matching one
    wins; when none matches the cursor moves one character. An unterminated
    block raises ``UnterminatedBlock`` after the blocks before it.
    """
    lexer = Lexer(data)
    while not lexer.at_eof():
        start = lexer.pos
        for rule in rules:
            if not rule.begin_func(lexer):
                continue

            line = lexer.lineno(start)
            try:
                lines = rule.end_func(lexer)
            except UnterminatedBlock as e:
                e.line = line
                raise
            if rule.kind is not BlockKind.STRING:
                yield ScannedBlock(line, "".join(lines), data[start:lexer.pos])
            break
        else:
            lexer.pos += 1
