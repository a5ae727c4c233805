"""
Block type registry interface and in-memory implementation.

The schema compiler never reaches for a process-wide registry. It receives a
`BlockTypeRegistry` at call time and only uses two read operations:

- ``lookup_block_type(name)``: resolve one descriptor (``None`` if unknown).
- ``all_registered()``: every descriptor, in registration order.

`InMemoryBlockRegistry` is the default implementation. It also supports
``register``/``unregister`` so hosts can mirror plugin activation and
deactivation between generation calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Protocol, runtime_checkable

from blockschema.core.contracts.block_type import BlockTypeDescriptor


@runtime_checkable
class BlockTypeRegistry(Protocol):
    """Read-only view of the host's registered block types."""

    def lookup_block_type(self, name: str) -> BlockTypeDescriptor | None:
        """Return the descriptor registered under ``name``, if any."""
        ...

    def all_registered(self) -> Sequence[BlockTypeDescriptor]:
        """Return every registered descriptor in a deterministic order."""
        ...


class InMemoryBlockRegistry:
    """
    Ordered name -> descriptor store.

    Attributes
    ----------
    _blocks : dict[str, BlockTypeDescriptor]
        Descriptors keyed by block name; dict order is registration order.
    """

    __slots__ = ("_blocks",)

    def __init__(self, blocks: Iterable[BlockTypeDescriptor] = ()) -> None:
        self._blocks: dict[str, BlockTypeDescriptor] = {}
        for block in blocks:
            self.register(block)

    # ----------------------------- Mutation ---------------------------------

    def register(self, block: BlockTypeDescriptor, *, replace: bool = False) -> None:
        """
        Add ``block`` to the registry.

        Raises
        ------
        ValueError
            If a block with the same name exists and ``replace`` is False.
        """
        if block.name in self._blocks and not replace:
            raise ValueError(f"Block type {block.name!r} is already registered.")
        self._blocks[block.name] = block

    def unregister(self, name: str) -> BlockTypeDescriptor | None:
        """Remove and return the block registered as ``name`` (``None`` if absent)."""
        return self._blocks.pop(name, None)

    # ----------------------------- Read API ---------------------------------

    def lookup_block_type(self, name: str) -> BlockTypeDescriptor | None:
        return self._blocks.get(name)

    def all_registered(self) -> Sequence[BlockTypeDescriptor]:
        return list(self._blocks.values())

    # ------------------------------ Dunders ---------------------------------

    def __contains__(self, name: object) -> bool:
        return name in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[BlockTypeDescriptor]:
        return iter(list(self._blocks.values()))

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"InMemoryBlockRegistry({list(self._blocks)!r})"
