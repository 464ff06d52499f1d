"""Conversion between NDF layers and pydantic models.

Each model becomes one layer. The first node, ``$type``, names the model
class so a layer can be read back into the right subclass; every other node is
one field, keyed by field name::

    $type:game.items:Weapon;
    name:Sword;
    tags:[sharp,iron];
    stats
    {
        $type:game.items:Stats;
        damage:10;
    }

Scalars are stored as text and coerced back by pydantic on the way in.
Sequences of scalars are written inline as ``[a,b,c]``, nested models as a
single child layer, sequences of models as one child layer per item.
"""

from __future__ import annotations

import types
from enum import Enum
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from .nodes import Layer, Node


TYPE_KEY = "$type"
SEQUENCE_TYPES = (list, tuple, set, frozenset)


class MappingError(Exception):
    pass


def type_name(cls: type) -> str:
    return f"{cls.__module__}:{cls.__qualname__}"


# Models -> tree ---------------------------------------------------------------


def to_layer(model: BaseModel) -> Layer:
    layer = Layer()
    layer.add(Node(key=TYPE_KEY, value=type_name(type(model))))
    for name in type(model).model_fields:
        value = getattr(model, name)
        if value is None:
            continue
        layer.add(_to_field_node(name, value))
    return layer


def to_node(key: str, model: BaseModel) -> Node:
    return Node(key=key, children=[to_layer(model)])


def _to_field_node(key: str, value: Any) -> Node:
    if isinstance(value, BaseModel):
        return to_node(key, value)
    if isinstance(value, SEQUENCE_TYPES):
        items = list(value)
        if items and all(isinstance(item, BaseModel) for item in items):
            return Node(key=key, children=[to_layer(item) for item in items])
        return Node(key=key, value=_format_sequence(items))
    if isinstance(value, dict):
        node = Node(key=key)
        for item_key, item in value.items():
            if item is not None:
                node.append(_to_field_node(str(item_key), item))
        return node
    return Node(key=key, value=_format_scalar(value))


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _format_sequence(items: list[Any]) -> str:
    return "[" + ",".join(_format_scalar(item) for item in items) + "]"


# Tree -> models ---------------------------------------------------------------


def from_layer(layer: Layer, model_cls: type[BaseModel]) -> BaseModel:
    cls = _resolve_type(layer.get_value(TYPE_KEY), model_cls)
    data: dict[str, Any] = {}
    for name, field_info in cls.model_fields.items():
        node = layer.get(name)
        if node is None:
            continue
        data[name] = _from_field_node(node, field_info.annotation)
    try:
        return cls.model_validate(data)
    except ValidationError as exc:
        raise MappingError(f"Layer does not describe a valid {cls.__name__}") from exc


def from_node(node: Node, model_cls: type[BaseModel]) -> BaseModel:
    if not node.children:
        raise MappingError(f"Node '{node.key}' has no child layer to read a {model_cls.__name__} from")
    return from_layer(node.children[0], model_cls)


def _from_field_node(node: Node, annotation: Any) -> Any:
    annotation = _unwrap_optional(annotation)
    origin = get_origin(annotation)

    if _is_model(annotation):
        return from_node(node, annotation) if node.children else None

    if origin in SEQUENCE_TYPES:
        args = get_args(annotation)
        item_type = _unwrap_optional(args[0]) if args else Any
        if _is_model(item_type):
            return [from_layer(child, item_type) for child in node.children]
        return _parse_sequence(node.value)

    if origin is dict:
        args = get_args(annotation)
        value_type = args[1] if len(args) == 2 else Any
        result: dict[str, Any] = {}
        for layer in node.children:
            for key, child in layer.items():
                result[key] = _from_field_node(child, value_type)
        return result

    return node.value


def _parse_sequence(text: str | None) -> list[str]:
    if text is None:
        return []
    inner = text[1:-1] if text.startswith("[") and text.endswith("]") else text
    if not inner:
        return []
    return inner.split(",")


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        candidates = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(candidates) == 1:
            return candidates[0]
    return annotation


def _is_model(annotation: Any) -> bool:
    return get_origin(annotation) is None and isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _resolve_type(name: str | None, model_cls: type[BaseModel]) -> type[BaseModel]:
    if name is None:
        return model_cls
    pending = [model_cls]
    while pending:
        cls = pending.pop()
        if type_name(cls) == name:
            return cls
        pending.extend(cls.__subclasses__())
    raise MappingError(f"'{name}' is not {model_cls.__name__} or one of its subclasses")


__all__ = [
    "MappingError",
    "TYPE_KEY",
    "from_layer",
    "from_node",
    "to_layer",
    "to_node",
    "type_name",
]
