"""Nested dictionary format (NDF) parsing, formatting and macro expansion."""

from .nodes import Layer, Node
from .reader import CharReader
from .parser import NDFParser, ParserConfig, parse, parse_layers
from .preprocessor import (
    MissingVariableError,
    Preprocessor,
    PreprocessorConfig,
    PreprocessorError,
    preprocess,
)
from .formatter import NDFFormatter, escape_key, escape_value, render
from .document import NDFDocument
from .mapping import MappingError, from_layer, from_node, to_layer, to_node

__all__ = [
    "Layer",
    "Node",
    "CharReader",
    "NDFParser",
    "ParserConfig",
    "parse",
    "parse_layers",
    "MissingVariableError",
    "Preprocessor",
    "PreprocessorConfig",
    "PreprocessorError",
    "preprocess",
    "NDFFormatter",
    "escape_key",
    "escape_value",
    "render",
    "NDFDocument",
    "MappingError",
    "from_layer",
    "from_node",
    "to_layer",
    "to_node",
]
