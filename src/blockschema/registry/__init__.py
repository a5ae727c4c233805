"""Registry collaborator: interface, in-memory store, file loader and filter."""

from __future__ import annotations

from .base import BlockTypeRegistry, InMemoryBlockRegistry
from .filter import resolve_children, select_allowed_blocks, supports_nesting
from .loader import load_registry

__all__ = [
    "BlockTypeRegistry",
    "InMemoryBlockRegistry",
    "load_registry",
    "resolve_children",
    "select_allowed_blocks",
    "supports_nesting",
]
