"""
Schema compiler: block registry in, closed JSON Schema document out.

Pipeline
--------
1. **Filter**: keep the registered blocks whose name is allow-listed.
2. **Compile**: build one fragment per block (name tag, attribute object and,
   for blocks with a nesting rule, an ``innerBlocks`` array).
3. **Assemble**: wrap the top-level fragments in an ``anyOf`` under
   ``properties.blocks`` of a fixed draft-07 skeleton.

Fragments are memoized per call in a :class:`CompilationSession`, so a child
referenced by several parents is compiled once and every reference points at
the same dict. The session also tracks the blocks currently being compiled;
re-entering one of them means the nesting rules loop, which raises
:class:`CyclicNestingDetected` instead of recursing forever.

The compiler itself holds only configuration and the injected registry. All
per-call state lives in the session, so one compiler may serve concurrent
callers.
"""

from __future__ import annotations

import copy
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from blockschema.core.contracts.block_type import BlockTypeDescriptor
from blockschema.core.errors import (
    CyclicNestingDetected,
    NestingOutsideAllowList,
    UnknownBlockTypeReferenced,
)
from blockschema.core.settings import get_logger, load_settings, stray_nesting_children
from blockschema.registry.base import BlockTypeRegistry
from blockschema.registry.filter import (
    resolve_children,
    select_allowed_blocks,
    supports_nesting,
)

from .inference import Omission, infer_attributes

Fragment = dict[str, Any]
SchemaDocument = dict[str, Any]

DRAFT_07 = "http://json-schema.org/draft-07/schema#"

SCHEMA_SKELETON: SchemaDocument = {
    "$schema": DRAFT_07,
    "type": "object",
    "title": "UI Schema",
    "version": "1.0.0",
    "description": (
        "A schema for defining a UI structure with blocks, each having a name, "
        "attributes, and optional inner blocks."
    ),
    "required": ["blocks"],
    "additionalProperties": False,
    "properties": {},
}

logger = get_logger(__name__)


@dataclass(slots=True)
class CompilationSession:
    """Call-scoped state: fragment cache, omissions and the in-progress stack."""

    fragments: dict[str, Fragment] = field(default_factory=dict)
    omissions: list[Omission] = field(default_factory=list)
    in_progress: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CompiledSchema:
    """Result of one generation call."""

    document: SchemaDocument
    fragments: Mapping[str, Fragment]
    omissions: tuple[Omission, ...] = ()

    @property
    def block_names(self) -> list[str]:
        """Top-level block names, in ``anyOf`` order."""
        variants = self.document["properties"]["blocks"]["items"]["anyOf"]
        return [v["title"] for v in variants]


class SchemaCompiler:
    """Compile allow-listed block types from ``registry`` into one schema.

    Parameters
    ----------
    registry:
        Read-only registry collaborator; queried afresh on every call.
    allowed_blocks, nesting_rules, disallowed_attributes:
        Optional overrides. Anything left as ``None`` comes from
        :func:`load_settings`.

    Raises
    ------
    NestingOutsideAllowList
        If a nesting rule names a child that is not allow-listed.
    """

    def __init__(
        self,
        registry: BlockTypeRegistry,
        *,
        allowed_blocks: Collection[str] | None = None,
        nesting_rules: Mapping[str, Sequence[str]] | None = None,
        disallowed_attributes: Collection[str] | None = None,
    ) -> None:
        cfg = load_settings()
        self.registry = registry
        self.allowed_blocks: frozenset[str] = frozenset(
            cfg.allowed_blocks if allowed_blocks is None else allowed_blocks
        )
        self.nesting_rules: dict[str, tuple[str, ...]] = {
            parent: tuple(children)
            for parent, children in (
                cfg.nesting_rules if nesting_rules is None else nesting_rules
            ).items()
        }
        self.disallowed_attributes: frozenset[str] = frozenset(
            cfg.disallowed_attributes if disallowed_attributes is None else disallowed_attributes
        )

        stray = stray_nesting_children(self.allowed_blocks, self.nesting_rules)
        if stray:
            raise NestingOutsideAllowList(stray)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def select_allowed_blocks(self) -> list[BlockTypeDescriptor]:
        """Allow-listed descriptors currently in the registry."""
        return select_allowed_blocks(self.registry, self.allowed_blocks)

    def compile_block(self, name: str, session: CompilationSession | None = None) -> Fragment:
        """Return the fragment for ``name``, compiling it at most once per session.

        Raises
        ------
        UnknownBlockTypeReferenced
            If ``name`` is not registered.
        CyclicNestingDetected
            If ``name`` is reached again while its own fragment is being built.
        """
        session = session if session is not None else CompilationSession()

        cached = session.fragments.get(name)
        if cached is not None:
            return cached

        if name in session.in_progress:
            start = session.in_progress.index(name)
            raise CyclicNestingDetected([*session.in_progress[start:], name])

        descriptor = self.registry.lookup_block_type(name)
        if descriptor is None:
            parent = session.in_progress[-1] if session.in_progress else None
            raise UnknownBlockTypeReferenced(name, parent=parent)

        session.in_progress.append(name)
        try:
            fragment = self._build_fragment(descriptor, session)
        finally:
            session.in_progress.pop()

        session.fragments[name] = fragment
        return fragment

    def compile(self) -> CompiledSchema:
        """Run one full generation and keep the session's by-products."""
        session = CompilationSession()
        document = copy.deepcopy(SCHEMA_SKELETON)

        variants = [self.compile_block(b.name, session) for b in self.select_allowed_blocks()]
        document["properties"] = {
            "blocks": {
                "type": "array",
                "items": {"anyOf": variants},
            }
        }

        logger.info(
            "Compiled schema with %d top-level block(s), %d fragment(s), %d omitted attribute(s)",
            len(variants),
            len(session.fragments),
            len(session.omissions),
        )
        return CompiledSchema(
            document=document,
            fragments=dict(session.fragments),
            omissions=tuple(session.omissions),
        )

    def generate(self) -> SchemaDocument:
        """Return the schema document for the registry's current state."""
        return self.compile().document

    # ------------------------------------------------------------------ #
    # Fragment assembly
    # ------------------------------------------------------------------ #
    def _build_fragment(
        self, block: BlockTypeDescriptor, session: CompilationSession
    ) -> Fragment:
        attributes = infer_attributes(block, self.disallowed_attributes)
        for omission in attributes.omissions:
            logger.debug("Omitted attribute %s", omission.describe())
        session.omissions.extend(attributes.omissions)

        fragment: Fragment = {
            "type": "object",
            "title": block.name,
            "description": block.description,
            "additionalProperties": False,
            "required": ["name", "attributes"],
            "properties": {
                "name": {
                    "type": "string",
                    "description": "The name of the block.",
                    "enum": [block.name],
                },
                "attributes": {
                    "type": "object",
                    "description": "The attributes of the block.",
                    "additionalProperties": False,
                    "properties": attributes.properties,
                    "required": attributes.required,
                },
            },
        }

        if supports_nesting(block.name, self.nesting_rules):
            children = resolve_children(self.registry, self.nesting_rules, block.name)
            fragment["required"].append("innerBlocks")
            fragment["properties"]["innerBlocks"] = {
                "type": "array",
                "description": "An array of inner blocks.",
                "items": {
                    "anyOf": [self.compile_block(child.name, session) for child in children],
                },
            }

        return fragment


def generate_schema(
    registry: BlockTypeRegistry,
    *,
    allowed_blocks: Collection[str] | None = None,
    nesting_rules: Mapping[str, Sequence[str]] | None = None,
    disallowed_attributes: Collection[str] | None = None,
) -> SchemaDocument:
    """One-shot convenience wrapper around :class:`SchemaCompiler`."""
    compiler = SchemaCompiler(
        registry,
        allowed_blocks=allowed_blocks,
        nesting_rules=nesting_rules,
        disallowed_attributes=disallowed_attributes,
    )
    return compiler.generate()
