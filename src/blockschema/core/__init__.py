"""Core package initializer for blockschema.

Downstream code imports the pieces it needs directly:
    from blockschema.core.settings import settings, load_settings, Settings, get_logger
    from blockschema.core.errors import SchemaGenerationError
"""

from __future__ import annotations

__all__ = ["__doc__"]
