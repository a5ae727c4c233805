"""Centralized configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod

Besides the runtime flags it carries the three tables that bound the generated
schema: the allow-list of block types, the nesting rules and the attribute
names that never reach the model. List and mapping values are read from the
environment as JSON, e.g.::

    BLOCKSCHEMA_ALLOWED_BLOCKS='["core/paragraph", "core/heading"]'
"""

from __future__ import annotations

import logging
import os
from collections.abc import Collection, Mapping, Sequence
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Structured-output APIs cap the number of properties per schema, so only a
# handful of blocks fit.
DEFAULT_ALLOWED_BLOCKS: tuple[str, ...] = (
    "core/paragraph",
    "core/heading",
    "core/list",
    "core/image",
    "core/media-text",
)

DEFAULT_NESTING_RULES: dict[str, tuple[str, ...]] = {
    "core/media-text": ("core/paragraph", "core/heading", "core/list"),
}

DEFAULT_DISALLOWED_ATTRIBUTES: tuple[str, ...] = (
    "fontFamily",
    "borderColor",
    "className",
    "gradient",
    "templateLock",
    "height",
    "placeholder",
    "fontSize",
    "dropCap",
    "direction",
    "align",
    "id",
    "scale",
    "sizeSlug",
)

DEFAULT_MAX_PROPERTIES = 100


def stray_nesting_children(
    allowed_blocks: Collection[str], nesting_rules: Mapping[str, Sequence[str]]
) -> dict[str, list[str]]:
    """Return, per parent, the nested children that are not allow-listed."""
    allowed = set(allowed_blocks)
    stray: dict[str, list[str]] = {}
    for parent, children in nesting_rules.items():
        outside = [c for c in children if c not in allowed]
        if outside:
            stray[parent] = outside
    return stray


class Settings(BaseSettings):
    """Typed configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `BLOCKSCHEMA_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    allowed_blocks : list[str]
        Block type names eligible for the schema; maps from
        `BLOCKSCHEMA_ALLOWED_BLOCKS`.
    nesting_rules : dict[str, list[str]]
        Parent block name -> ordered child block names; maps from
        `BLOCKSCHEMA_NESTING_RULES`.
    disallowed_attributes : list[str]
        Attribute names dropped from every block; maps from
        `BLOCKSCHEMA_DISALLOWED_ATTRIBUTES`.
    max_properties : int
        Property ceiling enforced by the schema audit; maps from
        `BLOCKSCHEMA_MAX_PROPERTIES`.
    """

    environment: EnvName = Field(default="dev", alias="BLOCKSCHEMA_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    allowed_blocks: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_BLOCKS),
        alias="BLOCKSCHEMA_ALLOWED_BLOCKS",
    )
    nesting_rules: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_NESTING_RULES.items()},
        alias="BLOCKSCHEMA_NESTING_RULES",
    )
    disallowed_attributes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DISALLOWED_ATTRIBUTES),
        alias="BLOCKSCHEMA_DISALLOWED_ATTRIBUTES",
    )
    max_properties: int = Field(
        default=DEFAULT_MAX_PROPERTIES, ge=1, alias="BLOCKSCHEMA_MAX_PROPERTIES"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _children_must_be_allowed(self) -> Settings:
        """Reject nesting rules that would leak non-allow-listed blocks."""
        stray = stray_nesting_children(self.allowed_blocks, self.nesting_rules)
        if stray:
            listed = "; ".join(f"{p!r} -> {', '.join(c)}" for p, c in stray.items())
            raise ValueError(f"nesting rules list blocks outside the allow-list: {listed}")
        return self

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("BLOCKSCHEMA_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "blockschema") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
