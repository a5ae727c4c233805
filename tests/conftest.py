"""Shared fixtures for the blockschema test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from blockschema.core.settings import load_settings

SAMPLES = Path(__file__).resolve().parent.parent / "samples"


@pytest.fixture(autouse=True)  # type: ignore[misc]
def _fresh_settings() -> Iterator[None]:
    """Drop cached settings after each test so env overrides never leak."""
    yield
    load_settings.cache_clear()


@pytest.fixture  # type: ignore[misc]
def sample_registry_path() -> Path:
    """Path to the bundled WordPress-style sample registry."""
    return SAMPLES / "core_blocks.json"
