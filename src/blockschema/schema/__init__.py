"""Schema inference, compilation, auditing and output helpers."""

from __future__ import annotations

from .compiler import CompilationSession, CompiledSchema, SchemaCompiler, generate_schema
from .inference import Omission, OmitReason, infer_attributes, infer_property
from .limits import SchemaAudit, Violation, audit_schema, enforce_limits
from .output import response_format, validate_content

__all__ = [
    "CompilationSession",
    "CompiledSchema",
    "Omission",
    "OmitReason",
    "SchemaAudit",
    "SchemaCompiler",
    "Violation",
    "audit_schema",
    "enforce_limits",
    "generate_schema",
    "infer_attributes",
    "infer_property",
    "response_format",
    "validate_content",
]
