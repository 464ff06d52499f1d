from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import NotRequired, TextIO, TypedDict

from ndf.logger import Logger
from ndf.nodes import Layer, Node
from ndf.preprocessor import Preprocessor, PreprocessorConfig
from ndf.reader import CharReader, Position
from ndf.utils import resolve_config


WHITESPACE = frozenset("\r\n\t\0 ")
COMMENT = "/"
KEY_SEPARATOR = ":"
TERMINATOR = ";"
OPEN_BRACE = "{"
CLOSE_BRACE = "}"
ESCAPE = "\\"


class ScanPosition(Enum):
    KEY = auto()
    VALUE = auto()


@dataclass(slots=True)
class _Frame:
    """One open block: the layer list it fills and the layer being built."""

    layers: list[Layer]
    opened_at: Position | None = None
    current: Layer = field(default_factory=Layer)

    def add_node(self, node: Node) -> None:
        if node.key is None:
            return
        if node.key in self.current:
            self.layers.append(self.current)
            self.current = Layer()
        self.current.nodes[node.key] = node

    def close(self) -> None:
        if self.current:
            self.layers.append(self.current)
            self.current = Layer()


class ParserConfig(TypedDict):
    parse: NotRequired[bool]
    preprocess: NotRequired[bool]
    enable_logger: NotRequired[bool]
    log_level: NotRequired[int]
    preprocessor_config: NotRequired[PreprocessorConfig]


class ParserConfigRequired(TypedDict):
    parse: bool
    preprocess: bool
    enable_logger: bool
    log_level: int
    preprocessor_config: PreprocessorConfig


DEFAULT_CONFIG: ParserConfigRequired = {
    "parse": True,
    "preprocess": True,
    "enable_logger": True,
    "log_level": logging.WARNING,
    "preprocessor_config": {},
}


class NDFParser:
    """Scanner and tree builder for NDF text.

    The scanner is total: every character sequence produces a (possibly
    partial) tree. Blocks are tracked on an explicit stack of frames, so
    nesting depth is not limited by the interpreter's recursion limit.
    Only the preprocessor can fail, see :mod:`ndf.preprocessor`.
    """

    def __init__(self, source: str | TextIO, config: ParserConfig | None = None):
        self.config = resolve_config(config or {}, DEFAULT_CONFIG)
        self.logger = Logger(
            config={
                "name": "ndf.parser",
                "is_enabled": self.config["enable_logger"],
                "level": self.config["log_level"],
            }
        ).logger
        if isinstance(source, str):
            self.reader = CharReader(source)
        else:
            self.reader = CharReader.from_stream(source)
        self._stack: list[_Frame] = []
        self._node = Node()
        self._position = ScanPosition.KEY
        self._buffer: list[str] = []
        self._protected = 0
        self._escaped = False
        self.layers: list[Layer] = []
        if self.config["parse"]:
            self.layers = self.parse()

    @property
    def root(self) -> Node:
        return Node(children=self.layers)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def parse(self) -> list[Layer]:
        self.logger.info("Starting parse")
        layers: list[Layer] = []
        self._stack = [_Frame(layers)]
        self._reset_entry()

        while not self.reader.at_end:
            position = self.reader.position
            char = self.reader.read()

            if self._escaped:
                self._escaped = False
                self._buffer.append(char)
                self._protected = len(self._buffer)
                continue

            if char == COMMENT:
                if self.reader.peek() == COMMENT:
                    self.reader.skip_line()
                else:
                    self._buffer.append(char)
            elif char == KEY_SEPARATOR:
                # values may contain ':'
                if self._position is ScanPosition.VALUE:
                    self._buffer.append(char)
                else:
                    self._flush()
                    self._position = ScanPosition.VALUE
            elif char == TERMINATOR:
                self._flush()
                self._add_node()
            elif char == OPEN_BRACE:
                self._trim_buffer()
                self._flush()
                node = self._node
                self._add_node()
                self.logger.debug(f"Opening block '{node.key}' at {position}")
                self._stack.append(_Frame(node.children, opened_at=position))
            elif char == CLOSE_BRACE:
                if len(self._stack) == 1:
                    self.logger.warning(f"Unmatched '}}' at {position}, ignoring the rest of the input")
                    break
                self._close_block()
            elif char in WHITESPACE:
                if self._position is ScanPosition.VALUE:
                    self._buffer.append(char)
            elif char == ESCAPE:
                self._escaped = True
            else:
                self._buffer.append(char)

        self._discard_pending()
        while len(self._stack) > 1:
            frame = self._stack[-1]
            self.logger.warning(f"Unterminated block opened at {frame.opened_at}, closing at end of input")
            self._close_block()
        self._stack.pop().close()

        self.logger.info(f"Parsed {len(layers)} top-level layer(s)")
        if self.config["preprocess"]:
            preprocessor_config: PreprocessorConfig = {
                "enable_logger": self.config["enable_logger"],
                "log_level": self.config["log_level"],
                **self.config["preprocessor_config"],
            }
            Preprocessor(preprocessor_config).process(layers)
        return layers

    def _reset_entry(self) -> None:
        self._node = Node()
        self._position = ScanPosition.KEY
        self._buffer.clear()
        self._protected = 0

    def _flush(self) -> None:
        text = "".join(self._buffer)
        if self._position is ScanPosition.KEY:
            self._node.key = text
        else:
            self._node.value = text
        self._buffer.clear()
        self._protected = 0

    def _trim_buffer(self) -> None:
        # escaped characters are never trimmed
        end = len(self._buffer)
        while end > self._protected and self._buffer[end - 1] in WHITESPACE:
            end -= 1
        del self._buffer[end:]

    def _add_node(self) -> None:
        self.logger.debug(f"Adding node '{self._node.key}' with value {self._node.value!r}")
        self._stack[-1].add_node(self._node)
        self._reset_entry()

    def _close_block(self) -> None:
        self._discard_pending()
        self._stack.pop().close()
        self._reset_entry()

    def _discard_pending(self) -> None:
        if self._buffer or self._node.key is not None:
            self.logger.debug(f"Discarding unterminated entry at {self.reader.position}")


def parse_layers(source: str | TextIO, config: ParserConfig | None = None) -> list[Layer]:
    """Parse NDF text into its top-level layers."""
    parser_config: ParserConfig = {**(config or {}), "parse": True}
    return NDFParser(source, parser_config).layers


def parse(source: str | TextIO, config: ParserConfig | None = None) -> Node:
    """Parse NDF text into a root node whose children are the top-level layers."""
    return Node(children=parse_layers(source, config))


__all__ = [
    "DEFAULT_CONFIG",
    "NDFParser",
    "ParserConfig",
    "ScanPosition",
    "WHITESPACE",
    "parse",
    "parse_layers",
]
