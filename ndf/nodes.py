"""Node definitions for the NDF tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass(slots=True, eq=False)
class Layer:
    """Ordered group of sibling nodes with unique keys.

    A node's children are a list of layers rather than one mapping so that a
    key may repeat at the same nesting level: the repeat starts a new layer.
    Equality is order sensitive.
    """

    nodes: dict[str, "Node"] = field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str) -> "Layer":
        """Parse *text* and return its first layer (empty if there is none)."""
        from .parser import parse_layers

        layers = parse_layers(text)
        return layers[0] if layers else cls()

    def __getitem__(self, key: str) -> "Node":
        return self.nodes[key]

    def __contains__(self, key: object) -> bool:
        return key in self.nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __bool__(self) -> bool:
        return bool(self.nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Layer):
            return NotImplemented
        return list(self.nodes.items()) == list(other.nodes.items())

    def keys(self):
        return self.nodes.keys()

    def values(self):
        return self.nodes.values()

    def items(self):
        return self.nodes.items()

    def get(self, key: str, default: "Node | None" = None) -> "Node | None":
        return self.nodes.get(key, default)

    def get_value(self, key: str) -> str | None:
        node = self.nodes.get(key)
        return node.value if node is not None else None

    def add(self, node: "Node") -> None:
        if node.key is None:
            raise ValueError("Cannot add a node without a key to a layer")
        if node.key in self.nodes:
            raise KeyError(f"Layer already contains key '{node.key}'")
        self.nodes[node.key] = node

    def remove(self, key: str) -> "Node | None":
        return self.nodes.pop(key, None)

    def clone(self) -> "Layer":
        return Layer({key: node.clone() for key, node in self.nodes.items()})

    def to_text(self, pretty: bool = True) -> str:
        from .formatter import NDFFormatter

        return NDFFormatter(pretty=pretty).format_layer(self)


@dataclass(slots=True)
class Node:
    """A key with an optional value and any number of child layers."""

    key: str | None = None
    value: str | None = None
    children: list[Layer] = field(default_factory=list)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def __getitem__(self, index: int) -> Layer:
        return self.children[index]

    def __str__(self) -> str:
        return self.value if self.value is not None else ""

    def is_root(self) -> bool:
        return self.key is None and self.value is None

    def first(self, key: str) -> "Node | None":
        for layer in self.children:
            if key in layer:
                return layer[key]
        return None

    def find_all(self, key: str) -> list["Node"]:
        return [layer[key] for layer in self.children if key in layer]

    def append(self, node: "Node") -> None:
        """Add *node* as a child, opening a new layer if its key is taken."""
        if node.key is None:
            return
        if not self.children or node.key in self.children[-1]:
            self.children.append(Layer())
        self.children[-1].nodes[node.key] = node

    def add_entry(self, key: str, value: str | None = None) -> "Node":
        node = Node(key=key, value=value)
        self.append(node)
        return node

    def walk(self) -> Iterator["Node"]:
        """Yield this node and every descendant, depth first."""
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            yield node
            for layer in reversed(node.children):
                stack.extend(reversed(list(layer.values())))

    def replace_values(self, old_value: str, new_value: str | None) -> None:
        for node in self.walk():
            if node.value == old_value:
                node.value = new_value

    def substitute(self, name: str, text: str) -> None:
        """Replace every occurrence of *name* inside every value of the subtree."""
        for node in self.walk():
            if node.value is not None:
                node.value = node.value.replace(name, text)

    def clone(self) -> "Node":
        root = Node(key=self.key, value=self.value)
        stack: list[tuple[Node, Node]] = [(self, root)]
        while stack:
            source, target = stack.pop()
            for layer in source.children:
                copied = Layer()
                for key, child in layer.items():
                    child_copy = Node(key=child.key, value=child.value)
                    copied.nodes[key] = child_copy
                    stack.append((child, child_copy))
                target.children.append(copied)
        return root

    def to_text(self, pretty: bool = True) -> str:
        from .formatter import NDFFormatter

        return NDFFormatter(pretty=pretty).format_node(self)


__all__ = ["Layer", "Node"]
