"""
Registry filtering: which blocks reach the schema, and which nest where.

Both helpers are pure reads over an injected registry. The allow-list bounds
the schema's size, so `select_allowed_blocks` never adds anything the
allow-list does not name, and an allow-listed block missing from the registry
is simply absent (registration may not have happened yet).
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence

from blockschema.core.contracts.block_type import BlockTypeDescriptor
from blockschema.core.errors import UnknownBlockTypeReferenced

from .base import BlockTypeRegistry


def select_allowed_blocks(
    registry: BlockTypeRegistry, allowed_blocks: Collection[str]
) -> list[BlockTypeDescriptor]:
    """Return the registered descriptors whose name is allow-listed.

    Order follows the registry's own iteration order, not the allow-list's.
    """
    allowed = set(allowed_blocks)
    return [block for block in registry.all_registered() if block.name in allowed]


def supports_nesting(name: str, nesting_rules: Mapping[str, Sequence[str]]) -> bool:
    """Only names present as keys in the nesting rules may hold children."""
    return name in nesting_rules


def resolve_children(
    registry: BlockTypeRegistry,
    nesting_rules: Mapping[str, Sequence[str]],
    parent: str,
) -> list[BlockTypeDescriptor]:
    """Resolve the descriptors of every child allowed under ``parent``.

    Raises
    ------
    UnknownBlockTypeReferenced
        If a child named by the rule is not registered.
    """
    children: list[BlockTypeDescriptor] = []
    for child in nesting_rules.get(parent, ()):
        descriptor = registry.lookup_block_type(child)
        if descriptor is None:
            raise UnknownBlockTypeReferenced(child, parent=parent)
        children.append(descriptor)
    return children
