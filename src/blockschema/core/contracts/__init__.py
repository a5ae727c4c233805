"""Typed input contracts consumed by the schema compiler."""

from __future__ import annotations

from .block_type import AttributeSpec, BlockTypeDescriptor, DefaultKind, classify_default

__all__ = ["AttributeSpec", "BlockTypeDescriptor", "DefaultKind", "classify_default"]
