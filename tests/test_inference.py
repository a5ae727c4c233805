"""
Tests for attribute type inference.

Scope
-----
- Disallowed names never become properties.
- Source type tags are normalized (`NULL`, `rich-text` -> string).
- Containers need a non-empty default; arrays and objects infer their shape
  from it.
- Defaults that contradict the declared type cause an omission, not an error.
- Block-level inference keeps declaration order and requires every survivor.
"""

from __future__ import annotations

from typing import Any

import pytest

from blockschema.core.contracts.block_type import AttributeSpec, BlockTypeDescriptor
from blockschema.schema.inference import (
    PRIMITIVE_TYPES,
    InferenceContext,
    OmitReason,
    infer_attributes,
    infer_property,
    item_schema,
    normalize_type,
)

CTX = InferenceContext("test/block", frozenset({"align", "className"}))


def _infer(name: str = "attr", **spec: Any) -> Any:
    """Run inference for one attribute and return the Result."""
    return infer_property(name, AttributeSpec.model_validate(spec), CTX)


def _reason(name: str = "attr", **spec: Any) -> OmitReason:
    outcome = _infer(name, **spec)
    assert outcome.is_err(), f"expected omission, got {outcome!r}"
    return outcome.unwrap_err().reason


# --------------------------------------------------------------------------- #
# Normalization
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(  # type: ignore[misc]
    ("tag", "expected"),
    [
        ("NULL", "string"),
        ("null", "string"),
        ("rich-text", "string"),
        ("string", "string"),
        ("integer", "integer"),
        ("boolean", "boolean"),
        ("html-fragment", "html-fragment"),
        (None, None),
    ],
)
def test_normalize_type(tag: str | None, expected: str | None) -> None:
    """Synonyms collapse to string; everything else passes through."""
    assert normalize_type(tag) == expected


def test_no_value_and_formatted_text_become_strings() -> None:
    """Output properties never carry the raw source tags."""
    assert _infer(type="NULL").unwrap() == {"type": "string"}
    assert _infer(type="rich-text").unwrap() == {"type": "string"}
    for tag in ("NULL", "rich-text", "string", "boolean", "number"):
        assert _infer(type=tag).unwrap()["type"] in PRIMITIVE_TYPES


def test_item_schema_mapping() -> None:
    """Integers and floats share `number`; null carries no type."""
    assert item_schema(1) == {"type": "number"}
    assert item_schema(2.5) == {"type": "number"}
    assert item_schema("x") == {"type": "string"}
    assert item_schema(False) == {"type": "boolean"}
    assert item_schema([1]) == {"type": "array"}
    assert item_schema({"a": 1}) == {"type": "object"}
    assert item_schema(None) is None


# --------------------------------------------------------------------------- #
# Omission rules
# --------------------------------------------------------------------------- #


def test_disallowed_names_are_omitted_regardless_of_type() -> None:
    """Layout attributes are dropped even when perfectly typed."""
    assert _reason("align", type="string", default="left") is OmitReason.DISALLOWED
    assert _reason("className", type="string") is OmitReason.DISALLOWED


@pytest.mark.parametrize("tag", ["array", "object"])  # type: ignore[misc]
def test_containers_without_default_are_omitted(tag: str) -> None:
    """An open container cannot be expressed, so it never appears."""
    assert _reason(type=tag) is OmitReason.UNBOUNDED_CONTAINER
    assert _reason(type=tag, default=None) is OmitReason.UNBOUNDED_CONTAINER


def test_empty_container_defaults_are_omitted() -> None:
    """An empty default gives nothing to infer a shape from."""
    assert _reason(type="array", default=[]) is OmitReason.UNBOUNDED_CONTAINER
    assert _reason(type="object", default={}) is OmitReason.UNBOUNDED_CONTAINER


@pytest.mark.parametrize(  # type: ignore[misc]
    "spec",
    [
        {"type": "array", "default": {"a": 1}},
        {"type": "object", "default": [1, 2]},
        {"type": "string", "default": 5},
        {"type": "boolean", "default": "yes"},
        {"type": "integer", "default": 2.5},
        {"type": "number", "default": True},
    ],
)
def test_mismatched_defaults_are_omitted(spec: dict[str, Any]) -> None:
    """A default that contradicts its type is unboundable, never fatal."""
    assert _reason(**spec) is OmitReason.DEFAULT_MISMATCH


def test_object_default_with_null_member_is_omitted() -> None:
    """A null member leaves one sub-property without a type."""
    assert _reason(type="object", default={"url": None}) is OmitReason.UNBOUNDABLE_MEMBER


def test_untyped_attribute_without_constraints_is_omitted() -> None:
    """No type, no enum, no default: nothing to constrain."""
    assert _reason() is OmitReason.UNCONSTRAINED


# --------------------------------------------------------------------------- #
# Property shapes
# --------------------------------------------------------------------------- #


def test_array_items_come_from_first_element() -> None:
    """A float-valued default yields `number` items and keeps the default."""
    prop = _infer(type="array", default=[0.5, 1.5]).unwrap()
    assert prop == {"type": "array", "items": {"type": "number"}, "default": [0.5, 1.5]}


def test_array_with_null_first_element_has_no_item_constraint() -> None:
    """A null first element produces no `items` key at all."""
    prop = _infer(type="array", default=[None, "x"]).unwrap()
    assert "items" not in prop
    assert prop["default"] == [None, "x"]


def test_object_default_infers_closed_required_properties() -> None:
    """Every key of the default becomes a required, primitive sub-property."""
    prop = _infer(type="object", default={"url": "x", "count": 3}).unwrap()
    assert prop["type"] == "object"
    assert prop["properties"] == {"url": {"type": "string"}, "count": {"type": "number"}}
    assert prop["required"] == ["url", "count"]
    assert prop["additionalProperties"] is False
    assert prop["default"] == {"url": "x", "count": 3}


def test_nested_object_default_is_closed_all_the_way_down() -> None:
    """A `style`-like default nests dicts; each level is closed and required."""
    prop = _infer(type="object", default={"spacing": {"top": "1", "sides": [2]}}).unwrap()
    spacing = prop["properties"]["spacing"]
    assert spacing == {
        "type": "object",
        "properties": {
            "top": {"type": "string"},
            "sides": {"type": "array", "items": {"type": "number"}},
        },
        "required": ["top", "sides"],
        "additionalProperties": False,
    }


def test_nested_array_default_gets_item_schemas() -> None:
    """Arrays of arrays (and of objects) describe their inner items too."""
    rows = _infer(type="array", default=[["x"]]).unwrap()
    assert rows["items"] == {"type": "array", "items": {"type": "string"}}

    links = _infer(type="array", default=[{"url": "x"}]).unwrap()
    assert links["items"] == {
        "type": "object",
        "properties": {"url": {"type": "string"}},
        "required": ["url"],
        "additionalProperties": False,
    }


@pytest.mark.parametrize(  # type: ignore[misc]
    ("spec", "where"),
    [
        ({"type": "object", "default": {"spacing": {}}}, "'spacing'"),
        ({"type": "object", "default": {"spacing": {"top": None}}}, "'spacing.top'"),
        ({"type": "array", "default": [[]]}, "'[0]'"),
        ({"type": "array", "default": [{"a": []}]}, "'[0].a'"),
    ],
)
def test_unboundable_nested_members_drop_the_attribute(spec: dict[str, Any], where: str) -> None:
    """Empty or null nested members cannot be closed, so the attribute goes."""
    outcome = _infer(**spec)
    assert outcome.is_err()
    omission = outcome.unwrap_err()
    assert omission.reason is OmitReason.UNBOUNDABLE_MEMBER
    assert where in omission.detail


def test_enum_and_default_are_attached_in_order() -> None:
    """Enums keep their order; scalar defaults are copied through."""
    prop = _infer(type="string", enum=["rtl", "ltr"], default="ltr").unwrap()
    assert prop == {"type": "string", "enum": ["rtl", "ltr"], "default": "ltr"}


def test_integer_default_accepts_integral_values() -> None:
    """Whole-number defaults satisfy `integer`, including `2.0` from JSON."""
    assert _infer(type="integer", default=2).unwrap() == {"type": "integer", "default": 2}
    assert _infer(type="integer", default=2.0).is_ok()


def test_untyped_attribute_with_enum_survives() -> None:
    """An enum alone is a constraint worth keeping."""
    assert _infer(enum=["a", "b"]).unwrap() == {"enum": ["a", "b"]}


def test_unknown_type_tag_passes_through() -> None:
    """Forward compatibility: unrecognized tags are not rewritten."""
    assert _infer(type="html-fragment", default=7).unwrap() == {
        "type": "html-fragment",
        "default": 7,
    }


# --------------------------------------------------------------------------- #
# Block-level inference
# --------------------------------------------------------------------------- #


def test_infer_attributes_keeps_order_and_requires_survivors() -> None:
    """Required equals present, in declaration order, with omissions recorded."""
    block = BlockTypeDescriptor.model_validate(
        {
            "name": "core/heading",
            "attributes": {
                "level": {"type": "integer", "default": 2},
                "align": {"type": "string"},
                "content": {"type": "rich-text"},
                "levelOptions": {"type": "array"},
            },
        }
    )

    result = infer_attributes(block, {"align"})

    assert list(result.properties) == ["level", "content"]
    assert result.required == ["level", "content"]
    assert [(o.attribute, o.reason) for o in result.omissions] == [
        ("align", OmitReason.DISALLOWED),
        ("levelOptions", OmitReason.UNBOUNDED_CONTAINER),
    ]
    assert result.omissions[0].block == "core/heading"
    assert result.omissions[1].describe().startswith("core/heading.levelOptions")
