"""Example: load the bundled Flutter plugin and resolve a few command lines."""

import asyncio
import os
import sys

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cmdschema import Resolver, render_commands_section
from cmdschema.loader import load_plugin

PLUGIN_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "flutter-plugin")

LINES = [
    "/build --platform ios",
    "/build --platform windows",
    "/test test/widgets test/models --coverage --shards 4",
    "/test --coverage yes",
    "/add-backend supabase auth",
    "/deploy now",
]


async def main():
    """Run the resolver example."""
    print("=" * 60)
    print("cmdschema Example")
    print("=" * 60)

    result = await load_plugin(PLUGIN_DIR)
    if not result.ok:
        for error in result.errors:
            print(f"load error: {error}")
        return

    registry = result.unwrap()
    print(render_commands_section(registry.schemas()))

    resolver = Resolver(registry)
    for line in LINES:
        print(f"\n> {line}")
        resolution = resolver.resolve_line(line)
        if resolution.ok:
            print(f"  values: {dict(resolution.context.values)}")
        else:
            print(f"  {resolution.error.code}: {resolution.error}")


if __name__ == "__main__":
    asyncio.run(main())
