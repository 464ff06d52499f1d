"""Pull-style character source with one character of lookahead."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TextIO


EOF = ""


@dataclass(slots=True)
class Position:
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class CharReader:
    def __init__(self, text: str):
        self.text = text
        self._pos = 0
        self._line = 1
        self._column = 1

    @classmethod
    def from_stream(cls, stream: TextIO) -> "CharReader":
        return cls(stream.read())

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self.text)

    @property
    def position(self) -> Position:
        return Position(self._line, self._column)

    def peek(self) -> str:
        """Return the next character without consuming it, ``EOF`` at the end."""
        if self.at_end:
            return EOF
        return self.text[self._pos]

    def read(self) -> str:
        if self.at_end:
            return EOF
        char = self.text[self._pos]
        self._pos += 1
        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return char

    def skip_line(self) -> None:
        """Consume up to and including the next newline."""
        while not self.at_end:
            if self.read() == "\n":
                return


__all__ = ["CharReader", "EOF", "Position"]
