"""Registry of layer creators keyed by operator type."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from kuiperinfer.layer import Layer

Creator = Callable[[Any], Layer]

_REGISTRY: dict[str, Creator] = {}


def register_creator(layer_type: str, creator: Creator) -> None:
    """Register ``creator`` for ``layer_type``; each type may be registered once."""
    if not callable(creator):
        raise TypeError("layer creator must be callable")
    if layer_type in _REGISTRY:
        raise ValueError(f"Layer type: {layer_type} has already registered!")
    _REGISTRY[layer_type] = creator


def create_layer(layer_type: str, op: Any) -> Layer:
    """Build a layer for ``op`` with the creator registered for ``layer_type``."""
    try:
        creator = _REGISTRY[layer_type]
    except KeyError:
        raise KeyError(f"Can not find the layer type: {layer_type}") from None
    layer = creator(op)
    if not isinstance(layer, Layer):
        raise TypeError(f"Create the layer: {layer_type} failed")
    return layer


def registered_types() -> list[str]:
    """Return the registered layer types, sorted."""
    return sorted(_REGISTRY)