"""
Helpers for the orchestration side of the schema.

- :func:`validate_content` checks a model's structured reply against the
  generated document and returns readable error lines.
- :func:`response_format` wraps the document in the ``json_schema`` payload
  that structured-output chat APIs accept. Sending it is the caller's job.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from jsonschema import Draft7Validator

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_content(document: Mapping[str, Any], content: Any) -> list[str]:
    """Validate ``content`` against ``document``; an empty list means valid.

    Messages are prefixed with the JSON path of the failing value and sorted
    so output is stable between runs.
    """
    validator = Draft7Validator(document)
    return sorted(f"{e.json_path}: {e.message}" for e in validator.iter_errors(content))


def response_format(
    document: Mapping[str, Any], name: str = "ui_schema", *, strict: bool = True
) -> dict[str, Any]:
    """Return the structured-output ``response_format`` payload for ``document``.

    Raises
    ------
    ValueError
        If ``name`` is not 1-64 characters of letters, digits, ``_`` or ``-``.
    """
    if not _NAME_PATTERN.match(name):
        raise ValueError(f"Invalid schema name {name!r}: use 1-64 of [A-Za-z0-9_-].")
    return {
        "type": "json_schema",
        "json_schema": {
            "name": name,
            "strict": strict,
            "schema": dict(document),
        },
    }
