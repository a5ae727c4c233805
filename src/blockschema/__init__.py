"""blockschema package bootstrap.

Compiles a block-type registry into a closed JSON Schema that constrains a
generative model's structured output.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
