"""
Block Type Contracts

These Pydantic models describe what the host registry hands us: one
`BlockTypeDescriptor` per registered block, each carrying an ordered mapping of
`AttributeSpec` entries. They mirror the subset of a ``block.json`` manifest
that matters for schema generation; every other manifest key (``title``,
``category``, ``supports``, ``source``, ``selector`` ...) is ignored on load.

Default values are untyped JSON in the manifest. `classify_default` turns them
into an explicit `DefaultKind` tag so type inference can switch on it instead
of probing Python types ad hoc.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DefaultKind(str, Enum):
    """Runtime shape of an attribute default (or of one of its members)."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def classify_default(value: Any) -> DefaultKind:
    """Return the tag for a JSON-compatible value.

    ``bool`` is tested before numbers because it subclasses ``int``. Anything
    that is not JSON-shaped is reported as ``NULL`` so callers treat it as
    "no usable value".
    """
    if value is None:
        return DefaultKind.NULL
    if isinstance(value, bool):
        return DefaultKind.BOOLEAN
    if isinstance(value, int | float):
        return DefaultKind.NUMBER
    if isinstance(value, str):
        return DefaultKind.STRING
    if isinstance(value, list | tuple):
        return DefaultKind.SEQUENCE
    if isinstance(value, dict):
        return DefaultKind.MAPPING
    return DefaultKind.NULL


class AttributeSpec(BaseModel):
    """One declared attribute of a block type."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = Field(
        default=None,
        description="Declared type tag, e.g. 'string', 'array', 'rich-text' or 'NULL'.",
    )
    default: Any = Field(default=None, description="Optional default value (JSON).")
    enum: list[Any] | None = Field(default=None, description="Ordered allowed values.")

    @property
    def has_default(self) -> bool:
        """A JSON ``null`` default counts as no default at all."""
        return self.default is not None

    @property
    def default_kind(self) -> DefaultKind:
        """Tag of the default value's runtime shape."""
        return classify_default(self.default)


class BlockTypeDescriptor(BaseModel):
    """A registered block type as exposed by the host registry."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, description="Namespaced id, e.g. 'core/paragraph'.")
    description: str = Field(default="", description="Human-readable summary.")
    attributes: dict[str, AttributeSpec] = Field(
        default_factory=dict, description="Attribute name -> spec, in declaration order."
    )


__all__ = ["AttributeSpec", "BlockTypeDescriptor", "DefaultKind", "classify_default"]
