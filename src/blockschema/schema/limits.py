"""
Audit a schema document against a structured-output model's constraints.

A schema can be valid draft-07 and still be rejected by the model's
function-calling interface. The audit walks the document as it would be
serialized (a shared fragment is visited at every place it appears, exactly
like the model counts it) and reports:

``draft7``
    The document fails ``Draft7Validator.check_schema``.
``property-budget``
    More properties in total than the configured ceiling.
``open-object``
    An object node without ``additionalProperties: false``.
``unconstrained-object``
    An object node without ``properties``.
``unconstrained-array``
    An array node without ``items``.
``optional-property``
    An object whose ``required`` list differs from its property keys.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from pydantic import BaseModel, Field

from blockschema.core.errors import SchemaLimitExceeded
from blockschema.core.settings import load_settings


class Violation(BaseModel):
    """One broken constraint, located by a dotted path from the root (``$``)."""

    path: str
    rule: str
    message: str


class SchemaAudit(BaseModel):
    """Outcome of :func:`audit_schema`."""

    total_properties: int = Field(ge=0)
    max_properties: int = Field(ge=1)
    violations: list[Violation] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def rules(self) -> set[str]:
        """Names of the rules that fired."""
        return {v.rule for v in self.violations}


def _walk(node: Any, path: str) -> Iterator[tuple[str, Mapping[str, Any]]]:
    """Yield every schema node reachable through properties, items and anyOf."""
    if not isinstance(node, Mapping):
        return
    yield path, node

    properties = node.get("properties")
    if isinstance(properties, Mapping):
        for key, sub in properties.items():
            yield from _walk(sub, f"{path}.properties.{key}")

    items = node.get("items")
    if isinstance(items, Mapping):
        yield from _walk(items, f"{path}.items")

    alternatives = node.get("anyOf")
    if isinstance(alternatives, list):
        for i, alt in enumerate(alternatives):
            yield from _walk(alt, f"{path}.anyOf[{i}]")


def _check_node(path: str, node: Mapping[str, Any]) -> list[Violation]:
    found: list[Violation] = []
    kind = node.get("type")

    if kind == "object":
        if node.get("additionalProperties") is not False:
            found.append(
                Violation(
                    path=path, rule="open-object", message="additionalProperties must be false"
                )
            )
        properties = node.get("properties")
        if not isinstance(properties, Mapping):
            found.append(
                Violation(
                    path=path, rule="unconstrained-object", message="object declares no properties"
                )
            )
        else:
            required = list(node.get("required", []))
            if set(required) != set(properties):
                missing = sorted(set(properties) - set(required))
                found.append(
                    Violation(
                        path=path,
                        rule="optional-property",
                        message=f"properties not required: {', '.join(missing) or '-'}",
                    )
                )
    elif kind == "array" and "items" not in node:
        found.append(
            Violation(path=path, rule="unconstrained-array", message="array declares no items")
        )

    return found


def count_properties(document: Mapping[str, Any]) -> int:
    """Total number of property definitions across the serialized document."""
    total = 0
    for _, node in _walk(document, "$"):
        properties = node.get("properties")
        if isinstance(properties, Mapping):
            total += len(properties)
    return total


def audit_schema(document: Mapping[str, Any], max_properties: int | None = None) -> SchemaAudit:
    """Check ``document`` against draft-07 and the structured-output limits."""
    ceiling = max_properties if max_properties is not None else load_settings().max_properties
    violations: list[Violation] = []

    try:
        Draft7Validator.check_schema(document)
    except SchemaError as e:
        where = ".".join(str(p) for p in e.absolute_path)
        violations.append(
            Violation(path=f"$.{where}" if where else "$", rule="draft7", message=e.message)
        )

    for path, node in _walk(document, "$"):
        violations.extend(_check_node(path, node))

    total = count_properties(document)
    if total > ceiling:
        violations.append(
            Violation(
                path="$",
                rule="property-budget",
                message=f"{total} properties exceed the limit of {ceiling}",
            )
        )

    return SchemaAudit(total_properties=total, max_properties=ceiling, violations=violations)


def enforce_limits(document: Mapping[str, Any], max_properties: int | None = None) -> SchemaAudit:
    """Like :func:`audit_schema` but raise :class:`SchemaLimitExceeded` on violations."""
    audit = audit_schema(document, max_properties)
    if not audit.ok:
        raise SchemaLimitExceeded(audit)
    return audit
