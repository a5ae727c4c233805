"""Named failures raised while building a schema.

Schema generation is total over consistent input; the exceptions below mark
the cases where the registry or the configuration contradicts itself. They
share one base class so the CLI and scripts can catch a single type.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blockschema.schema.limits import SchemaAudit


class SchemaGenerationError(Exception):
    """Base class for every failure surfaced by blockschema."""


class UnknownBlockTypeReferenced(SchemaGenerationError):
    """A nesting rule points at a block type the registry does not know."""

    def __init__(self, block_name: str, parent: str | None = None) -> None:
        self.block_name = block_name
        self.parent = parent
        where = f" (nested under {parent!r})" if parent else ""
        super().__init__(f"Block type {block_name!r} is not registered{where}.")


class CyclicNestingDetected(SchemaGenerationError):
    """Nesting rules loop back onto a block that is still being compiled."""

    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"Cyclic nesting detected: {' -> '.join(self.path)}")


class NestingOutsideAllowList(SchemaGenerationError):
    """Nesting rules would embed blocks that the allow-list excludes."""

    def __init__(self, stray: Mapping[str, Sequence[str]]) -> None:
        self.stray = {parent: list(children) for parent, children in stray.items()}
        listed = "; ".join(f"{p!r} -> {', '.join(c)}" for p, c in self.stray.items())
        super().__init__(f"Nesting rules list blocks outside the allow-list: {listed}")


class RegistryLoadError(SchemaGenerationError):
    """A registry file or manifest could not be read or parsed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot load block registry from {self.path}: {reason}")


class SchemaLimitExceeded(SchemaGenerationError):
    """The generated document breaks the downstream model's schema limits."""

    def __init__(self, audit: SchemaAudit) -> None:
        self.audit = audit
        rules = sorted({v.rule for v in audit.violations})
        super().__init__(
            f"Schema violates {len(audit.violations)} constraint(s): {', '.join(rules)}"
        )


__all__ = [
    "SchemaGenerationError",
    "UnknownBlockTypeReferenced",
    "CyclicNestingDetected",
    "NestingOutsideAllowList",
    "RegistryLoadError",
    "SchemaLimitExceeded",
]
