# scripts/smoke.py
"""
Smoke Test Script for the blockschema compiler.

Usage
-----
1. Compile the bundled sample registry:
    $ uv run python scripts/smoke.py

2. Compile a registry file or a directory of block.json manifests:
    $ uv run python scripts/smoke.py --registry path/to/blocks/
"""

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path

from dotenv import load_dotenv

from blockschema.core.errors import SchemaGenerationError
from blockschema.registry.loader import load_registry
from blockschema.schema.compiler import SchemaCompiler
from blockschema.schema.limits import audit_schema

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

DEFAULT_REGISTRY = Path(__file__).resolve().parent.parent / "samples" / "core_blocks.json"


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run blockschema Smoke Test")
    parser.add_argument(
        "--registry", "-r", type=str, help="Registry JSON file or manifest directory"
    )
    parser.add_argument("--dump", action="store_true", help="Print the full schema JSON")
    args = parser.parse_args()

    source = Path(args.registry) if args.registry else DEFAULT_REGISTRY
    if not source.exists():
        print(f"❌ Registry not found: {source}")
        return
    print(f"\n📂 Using registry: {source}")

    # 1. Compilation Phase
    try:
        compiled = SchemaCompiler(load_registry(source)).compile()
    except SchemaGenerationError as exc:
        print(f"\n❌ Compilation Failed: {exc}")
        traceback.print_exc()
        return

    print("\n" + "=" * 60)
    print("✅ Schema Compiled Successfully!")
    print("=" * 60)

    # 2. Inspection Phase
    print("\n📌 Blocks:")
    for name in compiled.block_names:
        fragment = compiled.fragments[name]
        attrs = fragment["properties"]["attributes"]["required"]
        inner = fragment["properties"].get("innerBlocks")
        suffix = f" (+{len(inner['items']['anyOf'])} inner)" if inner else ""
        print(f"  - [{name}]: {len(attrs)} attributes{suffix}")

    print("\n🕵️  Omitted Attributes:")
    for omission in compiled.omissions:
        print(f"  - {omission.describe()}")

    # 3. Audit Phase
    audit = audit_schema(compiled.document)
    print(f"\n🧮 Properties: {audit.total_properties}/{audit.max_properties}")
    if audit.ok:
        print("✅ Audit passed")
    for v in audit.violations:
        print(f"  ⚠️  {v.rule} {v.path}: {v.message}")

    if args.dump:
        print(json.dumps(compiled.document, indent=2))


if __name__ == "__main__":
    main()
