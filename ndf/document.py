"""NDF document container with file loading and saving."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .formatter import NDFFormatter
from .nodes import Layer, Node
from .parser import ParserConfig, parse


@dataclass
class NDFDocument:
    root: Node = field(default_factory=Node)
    path: Path | None = None

    @classmethod
    def from_text(cls, text: str, config: ParserConfig | None = None) -> "NDFDocument":
        return cls(root=parse(text, config))

    @classmethod
    def from_file(cls, path: str | Path, config: ParserConfig | None = None, encoding: str = "utf-8") -> "NDFDocument":
        path = Path(path)
        with path.open("r", encoding=encoding) as handle:
            root = parse(handle, config)
        return cls(root=root, path=path)

    @property
    def layers(self) -> list[Layer]:
        return self.root.children

    def add_entry(self, key: str, value: str | None = None) -> Node:
        return self.root.add_entry(key, value)

    def to_text(self, pretty: bool = True, indent: str = "\t") -> str:
        return NDFFormatter(indent=indent, pretty=pretty).format_node(self.root)

    def save(self, path: str | Path | None = None, pretty: bool = True, encoding: str = "utf-8") -> Path:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("No path given and the document was not loaded from a file")
        target.write_text(self.to_text(pretty=pretty), encoding=encoding)
        self.path = target
        return target


__all__ = ["NDFDocument"]
