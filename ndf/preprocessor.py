"""Macro expansion for freshly parsed NDF layers.

Two directives are understood::

    Range:@PP.Expand[100,150];

turns the enclosing layer into one copy per listed value, and::

    @PP.Replace[Dmg,Name]
    {
        Dmg:10;
        Name:Sword;

        Dmg:12;
        Name:Axe;
    }
    Label:Name deals Dmg;

turns the enclosing layer into one copy per child layer of the directive
(the repeated keys above start the second layer),
with every variable name substituted in every value of the copy and the
directive entry removed. Several directives in one layer multiply out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NotRequired, TypedDict

from ndf.logger import Logger
from ndf.nodes import Layer, Node
from ndf.utils import resolve_config


EXPAND_PREFIX = "@PP.Expand["
REPLACE_PREFIX = "@PP.Replace["
DIRECTIVE_SUFFIX = "]"


class PreprocessorError(Exception):
    pass


class MissingVariableError(PreprocessorError):
    def __init__(self, variable: str, directive: str):
        self.variable = variable
        self.directive = directive
        super().__init__(f"{directive} does not define all required variables. Missing {variable}")


class PreprocessorConfig(TypedDict):
    enable_logger: NotRequired[bool]
    log_level: NotRequired[int]


class PreprocessorConfigRequired(TypedDict):
    enable_logger: bool
    log_level: int


DEFAULT_CONFIG: PreprocessorConfigRequired = {"enable_logger": True, "log_level": logging.WARNING}


def directive_arguments(text: str | None, prefix: str) -> list[str] | None:
    """Return the comma separated arguments of ``prefix...]`` or ``None`` if *text* is not one."""
    if text is None or not text.startswith(prefix) or not text.endswith(DIRECTIVE_SUFFIX):
        return None
    inner = text[len(prefix) : -len(DIRECTIVE_SUFFIX)]
    if not inner:
        return []
    return inner.split(",")


@dataclass(slots=True)
class _Visit:
    layers: list[Layer]
    index: int = 0
    children_done: bool = False


class Preprocessor:
    def __init__(self, config: PreprocessorConfig | None = None):
        self.config = resolve_config(config or {}, DEFAULT_CONFIG)
        self.logger = Logger(
            config={
                "name": "ndf.preprocessor",
                "is_enabled": self.config["enable_logger"],
                "level": self.config["log_level"],
            }
        ).logger

    def process(self, layers: list[Layer]) -> list[Layer]:
        """Expand every directive in *layers* in place and return the list.

        A layer's child layers are always processed before the layer itself.
        When a layer expands, its copies take its place and the first copy is
        visited next, so remaining directives in the copies expand in turn.
        """
        stack = [_Visit(layers)]
        while stack:
            visit = stack[-1]
            if visit.index >= len(visit.layers):
                stack.pop()
                continue

            layer = visit.layers[visit.index]
            if not visit.children_done:
                visit.children_done = True
                for node in reversed(list(layer.values())):
                    if node.children:
                        stack.append(_Visit(node.children))
                continue

            visit.children_done = False
            expanded = self.expand_layer(layer)
            if expanded:
                visit.layers[visit.index : visit.index + 1] = expanded
            else:
                visit.index += 1
        return layers

    def expand_layer(self, layer: Layer) -> list[Layer]:
        """Expand the first directive found in *layer*; empty list if there is none."""
        for key, node in layer.items():
            variables = directive_arguments(key, REPLACE_PREFIX)
            if variables is not None and node.children:
                return self._replace(layer, key, node, variables)

            values = directive_arguments(node.value, EXPAND_PREFIX)
            if values:
                return self._expand(layer, key, values)
            if values is not None:
                self.logger.warning(f"'{key}' expands to no values, leaving it as written")
        return []

    def _expand(self, layer: Layer, key: str, values: list[str]) -> list[Layer]:
        self.logger.debug(f"Expanding '{key}' into {len(values)} layer(s)")
        expanded: list[Layer] = []
        for value in values:
            copy = layer.clone()
            copy[key].value = value
            expanded.append(copy)
        return expanded

    def _replace(self, layer: Layer, key: str, directive: Node, variables: list[str]) -> list[Layer]:
        # longest first so a name that prefixes another cannot clobber it
        ordered = sorted(variables, key=len, reverse=True)
        self.logger.debug(f"Replacing {ordered} across {len(directive.children)} instantiation(s)")
        expanded: list[Layer] = []
        for instantiation in directive.children:
            copy = layer.clone()
            for variable in ordered:
                if variable not in instantiation:
                    self.logger.error(f"{key} is missing variable '{variable}'")
                    raise MissingVariableError(variable, key)
                substitute = instantiation[variable].value or ""
                for node in copy.values():
                    node.substitute(variable, substitute)
            expanded.append(copy)
        for copy in expanded:
            copy.remove(key)
        return expanded


def preprocess(layers: list[Layer], config: PreprocessorConfig | None = None) -> list[Layer]:
    return Preprocessor(config).process(layers)


__all__ = [
    "DEFAULT_CONFIG",
    "EXPAND_PREFIX",
    "MissingVariableError",
    "Preprocessor",
    "PreprocessorConfig",
    "PreprocessorError",
    "REPLACE_PREFIX",
    "directive_arguments",
    "preprocess",
]
