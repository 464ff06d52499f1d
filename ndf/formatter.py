"""Formatter turning NDF trees back into text."""

from __future__ import annotations

from dataclasses import dataclass

from .nodes import Layer, Node
from .parser import WHITESPACE


ESCAPE = "\\"
VALUE_SPECIALS = frozenset(";{}\\")
KEY_SPECIALS = VALUE_SPECIALS | {":"} | WHITESPACE


def _escape(text: str, specials: frozenset[str], trailing_from: int) -> str:
    chars: list[str] = []
    for index, char in enumerate(text):
        if (
            char in specials
            or (char == "/" and text[index + 1 : index + 2] == "/")
            or (index >= trailing_from and char in WHITESPACE)
        ):
            chars.append(ESCAPE)
        chars.append(char)
    return "".join(chars)


def escape_value(value: str, protect_trailing: bool = False) -> str:
    """Escape *value* so the parser reads it back unchanged.

    ``;``, ``{``, ``}`` and ``\\`` are always escaped, ``/`` only when the next
    character is another ``/``. With *protect_trailing* the trailing
    whitespace is escaped too, which a value followed by ``{`` needs because
    the parser trims unescaped whitespace before a block.
    """
    trailing_from = len(value)
    if protect_trailing:
        while trailing_from > 0 and value[trailing_from - 1] in WHITESPACE:
            trailing_from -= 1
    return _escape(value, VALUE_SPECIALS, trailing_from)


def escape_key(key: str) -> str:
    return _escape(key, KEY_SPECIALS, len(key))


@dataclass
class NDFFormatter:
    indent: str = "\t"
    pretty: bool = True

    def format_node(self, node: Node, level: int = 0) -> str:
        # the synthetic root contributes no text of its own
        if node.is_root():
            return self.format_layers(node.children, level)
        return self._join(self._render([(node, level)]))

    def format_layers(self, layers: list[Layer], level: int = 0) -> str:
        stack: list[tuple[Node, int] | str] = []
        self._push_layers(stack, layers, level)
        return self._join(self._render(stack))

    def format_layer(self, layer: Layer, level: int = 0) -> str:
        return self.format_layers([layer], level)

    def _render(self, stack: list[tuple[Node, int] | str]) -> list[str]:
        parts: list[str] = []
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
                continue

            node, level = item
            head = f"{self._indent(level)}{self._format_head(node)}"
            if not node.children:
                parts.append(f"{head};")
                continue
            if self.pretty:
                parts.append(head)
                parts.append(f"{self._indent(level)}{{")
            else:
                parts.append(f"{head}{{")
            stack.append(f"{self._indent(level)}}}")
            self._push_layers(stack, node.children, level + 1)
        return parts

    def _push_layers(self, stack: list[tuple[Node, int] | str], layers: list[Layer], level: int) -> None:
        for index in range(len(layers) - 1, -1, -1):
            for node in reversed(list(layers[index].values())):
                stack.append((node, level))
            if index > 0 and self.pretty:
                stack.append("")

    def _format_head(self, node: Node) -> str:
        head = escape_key(node.key or "")
        if node.value is not None:
            head += ":" + escape_value(node.value, protect_trailing=bool(node.children))
        return head

    def _indent(self, level: int) -> str:
        return "" if level <= 0 or not self.pretty else self.indent * level

    def _join(self, parts: list[str]) -> str:
        return "\n".join(parts) if self.pretty else "".join(parts)


def render(node: Node, indent_level: int = 0, pretty: bool = True) -> str:
    return NDFFormatter(pretty=pretty).format_node(node, indent_level)


__all__ = ["NDFFormatter", "escape_key", "escape_value", "render"]
