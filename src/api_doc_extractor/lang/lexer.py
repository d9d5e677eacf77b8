"""Cursor scanner over one decoded source buffer.

A lexer is created per file scan and never shared between threads.
"""


class Lexer:
    """Sequential cursor over ``data``."""

    def __init__(self, data: str):
        self.data = data
        self.pos = 0
        # last (pos, line) pair computed by lineno()
        self._line_pos = 0
        self._line = 1

    def at_eof(self) -> bool:
        return self.pos >= len(self.data)

    def at_line_start(self) -> bool:
        return self.pos == 0 or self.data[self.pos - 1] == "\n"

    def match(self, token: str) -> bool:
        """Consume ``token`` if the cursor is on it.

        The cursor is left untouched when the token does not match.
        """
        if not token or not self.data.startswith(token, self.pos):
            return False
        self.pos += len(token)
        return True

    def skip_space(self, newline: bool = False) -> None:
        """Advance over whitespace; stops at a newline unless ``newline``."""
        data = self.data
        while self.pos < len(data):
            ch = data[self.pos]
            if not ch.isspace() or (ch == "\n" and not newline):
                break
            self.pos += 1

    def lineno(self, pos: int | None = None) -> int:
        """1-based line number of ``pos`` (the cursor by default)."""
        if pos is None:
            pos = self.pos
        if pos < self._line_pos:
            self._line_pos, self._line = 0, 1
        self._line += self.data.count("\n", self._line_pos, pos)
        self._line_pos = pos
        return self._line
