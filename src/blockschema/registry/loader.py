"""
File-backed registry loading.

Hosts that do not run in-process can still describe their blocks on disk.
`load_registry` accepts either:

JSON file
    - a list of descriptors: ``[{"name": "core/paragraph", ...}, ...]``
    - an envelope: ``{"blocks": [...]}``
    - a mapping keyed by block name: ``{"core/paragraph": {...}, ...}``;
      the key fills in ``name`` when the entry omits it.
Directory
    Scanned recursively for ``block.json`` manifests (sorted by path so the
    registry order is reproducible), one descriptor per manifest.

Every failure is reported as :class:`RegistryLoadError` naming the offending
path; nothing is silently skipped.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from blockschema.core.contracts.block_type import BlockTypeDescriptor
from blockschema.core.errors import RegistryLoadError
from blockschema.core.settings import get_logger

from .base import InMemoryBlockRegistry

MANIFEST_NAME = "block.json"

logger = get_logger(__name__)


def _read_json(path: Path) -> Any:
    """Parse ``path`` as UTF-8 JSON, wrapping I/O and decode errors."""
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise RegistryLoadError(path, str(e)) from e
    except json.JSONDecodeError as e:
        raise RegistryLoadError(path, f"invalid JSON ({e.msg} at line {e.lineno})") from e


def _entries(payload: Any, path: Path) -> Iterable[Mapping[str, Any]]:
    """Yield raw descriptor dicts from any of the supported file layouts."""
    if isinstance(payload, dict) and isinstance(payload.get("blocks"), list):
        payload = payload["blocks"]

    if isinstance(payload, list):
        for item in payload:
            if not isinstance(item, dict):
                raise RegistryLoadError(path, "every block entry must be a JSON object")
            yield item
        return

    if isinstance(payload, dict):
        for name, item in payload.items():
            if not isinstance(item, dict):
                raise RegistryLoadError(path, f"entry {name!r} must be a JSON object")
            yield {"name": name, **item}
        return

    raise RegistryLoadError(path, "expected a list or object of block descriptors")


def _parse(raw: Mapping[str, Any], path: Path) -> BlockTypeDescriptor:
    try:
        return BlockTypeDescriptor.model_validate(raw)
    except ValidationError as e:
        label = raw.get("name", "<unnamed>")
        raise RegistryLoadError(path, f"block {label!r} is malformed: {e}") from e


def load_registry(path: str | Path) -> InMemoryBlockRegistry:
    """Build an :class:`InMemoryBlockRegistry` from a JSON file or manifest directory.

    Raises
    ------
    RegistryLoadError
        If the path is missing, unreadable, not JSON, structurally wrong, or
        declares the same block name twice.
    """
    source = Path(path)
    registry = InMemoryBlockRegistry()

    if source.is_dir():
        manifests = sorted(source.rglob(MANIFEST_NAME))
        for manifest in manifests:
            raw = _read_json(manifest)
            if not isinstance(raw, dict):
                raise RegistryLoadError(manifest, "a block manifest must be a JSON object")
            _add(registry, _parse(raw, manifest), manifest)
            logger.debug("Loaded block manifest %s", manifest)
    elif source.is_file():
        for raw in _entries(_read_json(source), source):
            _add(registry, _parse(raw, source), source)
    else:
        raise RegistryLoadError(source, "no such file or directory")

    logger.debug("Registry loaded from %s with %d block type(s)", source, len(registry))
    return registry


def _add(registry: InMemoryBlockRegistry, block: BlockTypeDescriptor, path: Path) -> None:
    try:
        registry.register(block)
    except ValueError as e:
        raise RegistryLoadError(path, str(e)) from e
