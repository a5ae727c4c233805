"""
Attribute type inference.

Each block attribute either becomes a JSON Schema property or is omitted. The
target dialect (a model's structured-output schema) cannot express open
containers, so inference collapses the registry's type variety into a closed
primitive set and drops anything it cannot bound.

Rules, applied in order per attribute
-------------------------------------
1. Names in the disallowed set are omitted.
2. The declared type is normalized: ``NULL``/``null`` and ``rich-text`` become
   ``string``; every other tag passes through unchanged.
3. ``array``/``object`` need a non-empty default to infer a shape from:
   - arrays take their item schema from the first element of the default;
   - objects get one required sub-property per key of the default and are
     closed with ``additionalProperties: false``;
   - nested lists and dicts inside a default are described the same way,
     recursively. A null or empty nested member cannot be bounded, so the
     whole attribute is omitted.
4. ``enum`` is attached as-is (order preserved).
5. ``default`` is attached when present.
6. A property left with no fields at all is omitted.

A default whose shape contradicts the declared type is treated like an
unbounded container: the attribute is dropped, never raised on.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from blockschema.core.contracts.block_type import (
    AttributeSpec,
    BlockTypeDescriptor,
    DefaultKind,
    classify_default,
)
from blockschema.core.result import Result, err, ok

Property = dict[str, Any]

PRIMITIVE_TYPES = frozenset({"null", "boolean", "object", "array", "string", "integer", "number"})
CONTAINER_TYPES = frozenset({"array", "object"})

TYPE_SYNONYMS: dict[str, str] = {
    "NULL": "string",
    "null": "string",
    "rich-text": "string",
}

_ITEM_TYPES: dict[DefaultKind, str] = {
    DefaultKind.BOOLEAN: "boolean",
    DefaultKind.NUMBER: "number",
    DefaultKind.STRING: "string",
    DefaultKind.SEQUENCE: "array",
    DefaultKind.MAPPING: "object",
}

_SCALAR_KINDS: dict[str, DefaultKind] = {
    "string": DefaultKind.STRING,
    "boolean": DefaultKind.BOOLEAN,
    "integer": DefaultKind.NUMBER,
    "number": DefaultKind.NUMBER,
}


class OmitReason(str, Enum):
    """Why an attribute did not make it into the schema."""

    DISALLOWED = "disallowed"
    UNBOUNDED_CONTAINER = "unbounded-container"
    DEFAULT_MISMATCH = "default-mismatch"
    UNBOUNDABLE_MEMBER = "unboundable-member"
    UNCONSTRAINED = "unconstrained"


@dataclass(frozen=True, slots=True)
class Omission:
    """Record of one dropped attribute."""

    block: str
    attribute: str
    reason: OmitReason
    detail: str = ""

    def describe(self) -> str:
        suffix = f": {self.detail}" if self.detail else ""
        return f"{self.block}.{self.attribute} ({self.reason.value}){suffix}"


@dataclass(frozen=True, slots=True)
class InferenceContext:
    """Per-block inputs that are not part of the attribute itself."""

    block_name: str
    disallowed_attributes: Collection[str] = frozenset()


@dataclass(slots=True)
class AttributeSchema:
    """Surviving attribute properties of one block, plus what was dropped."""

    properties: dict[str, Property] = field(default_factory=dict)
    omissions: list[Omission] = field(default_factory=list)

    @property
    def required(self) -> list[str]:
        """Every surviving attribute is mandatory."""
        return list(self.properties)


def normalize_type(tag: str | None) -> str | None:
    """Map source-specific type tags onto the primitive set.

    Unknown tags are returned unchanged so newer registries keep working.
    """
    if tag is None:
        return None
    return TYPE_SYNONYMS.get(tag, tag)


def item_schema(value: Any) -> Property | None:
    """Primitive schema for one runtime value; ``None`` when it carries no type.

    Integers and floats both map to ``number``.
    """
    item_type = _ITEM_TYPES.get(classify_default(value))
    return {"type": item_type} if item_type else None


def _default_matches(kind: str | None, default: Any) -> bool:
    """True when a scalar default agrees with its declared (normalized) type."""
    expected = _SCALAR_KINDS.get(kind or "")
    if expected is None:
        return True
    if classify_default(default) is not expected:
        return False
    if kind == "integer":
        return isinstance(default, int) or float(default).is_integer()
    return True


def _bounded_schema(value: Any, where: str) -> Result[Property, str]:
    """Closed schema for one default member, descending into nested containers.

    Nested lists take their items from their first element and nested dicts
    get one required sub-property per key, so no open container survives. A
    null or empty member leaves nothing to bound and is reported by location.
    """
    schema = item_schema(value)
    if schema is None:
        return err(f"default member {where!r} has no type")

    kind = classify_default(value)
    if kind is DefaultKind.SEQUENCE:
        if not value:
            return err(f"default member {where!r} is an empty array")
        return _bounded_schema(value[0], f"{where}[0]").map(
            lambda items: {**schema, "items": items}
        )
    if kind is DefaultKind.MAPPING:
        if not value:
            return err(f"default member {where!r} is an empty object")
        return _object_schema(value, where).map(lambda shape: {**schema, **shape})
    return ok(schema)


def _array_schema(default: Sequence[Any]) -> Result[Property, str]:
    # A null first element carries no item constraint.
    if default[0] is None:
        return ok({})
    return _bounded_schema(default[0], "[0]").map(lambda items: {"items": items})


def _object_schema(default: Mapping[str, Any], where: str = "") -> Result[Property, str]:
    properties: dict[str, Property] = {}
    for key, value in default.items():
        member = _bounded_schema(value, f"{where}.{key}" if where else str(key))
        if member.is_err():
            return err(member.unwrap_err())
        properties[str(key)] = member.unwrap()
    return ok(
        {
            "properties": properties,
            "required": list(properties),
            "additionalProperties": False,
        }
    )


def infer_property(
    attr_name: str, attr_spec: AttributeSpec, context: InferenceContext
) -> Result[Property, Omission]:
    """Infer the schema property for one attribute, or the reason to omit it."""

    def omit(reason: OmitReason, detail: str = "") -> Result[Property, Omission]:
        return err(Omission(context.block_name, attr_name, reason, detail))

    if attr_name in context.disallowed_attributes:
        return omit(OmitReason.DISALLOWED)

    kind = normalize_type(attr_spec.type)
    prop: Property = {} if kind is None else {"type": kind}
    default_kind = attr_spec.default_kind

    if kind in CONTAINER_TYPES:
        if not attr_spec.has_default:
            return omit(OmitReason.UNBOUNDED_CONTAINER, "no default to infer a shape from")
        if kind == "array" and default_kind is not DefaultKind.SEQUENCE:
            return omit(OmitReason.DEFAULT_MISMATCH, f"array default is {default_kind.value}")
        if kind == "object" and default_kind is not DefaultKind.MAPPING:
            return omit(OmitReason.DEFAULT_MISMATCH, f"object default is {default_kind.value}")
        if not attr_spec.default:
            return omit(OmitReason.UNBOUNDED_CONTAINER, "default is empty")

        if kind == "array":
            shaped = _array_schema(attr_spec.default)
        else:
            shaped = _object_schema(attr_spec.default)
        if shaped.is_err():
            return omit(OmitReason.UNBOUNDABLE_MEMBER, shaped.unwrap_err())
        prop.update(shaped.unwrap())
    elif attr_spec.has_default and not _default_matches(kind, attr_spec.default):
        return omit(OmitReason.DEFAULT_MISMATCH, f"{kind} default is {default_kind.value}")

    if attr_spec.enum is not None:
        prop["enum"] = list(attr_spec.enum)

    if attr_spec.has_default:
        prop["default"] = attr_spec.default

    if not prop:
        return omit(OmitReason.UNCONSTRAINED, "no type, enum or default")

    return ok(prop)


def infer_attributes(
    block: BlockTypeDescriptor, disallowed_attributes: Collection[str] = frozenset()
) -> AttributeSchema:
    """Run :func:`infer_property` over a block's attributes in declaration order."""
    context = InferenceContext(block.name, frozenset(disallowed_attributes))
    result = AttributeSchema()
    for attr_name, attr_spec in block.attributes.items():
        outcome = infer_property(attr_name, attr_spec, context)
        if outcome.is_ok():
            result.properties[attr_name] = outcome.unwrap()
        else:
            result.omissions.append(outcome.unwrap_err())
    return result


__all__ = [
    "AttributeSchema",
    "InferenceContext",
    "Omission",
    "OmitReason",
    "PRIMITIVE_TYPES",
    "Property",
    "TYPE_SYNONYMS",
    "infer_attributes",
    "infer_property",
    "item_schema",
    "normalize_type",
]
