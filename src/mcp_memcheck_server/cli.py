from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from mcp_memcheck_server.core.errors import LogFormatError, UnknownToolError
from mcp_memcheck_server.core.tools import ToolRegistry, default_tools


def main(argv: Sequence[str] | None = None) -> None:
    p = argparse.ArgumentParser(
        description="Turn a Valgrind or LeakSanitizer log into positioned diagnostics."
    )
    p.add_argument("tool", help="Log format: valgrind or leaksanitizer")
    p.add_argument("log_path")
    p.add_argument(
        "--workspace",
        action="append",
        default=None,
        help="Workspace root (repeatable). Frames outside every root are ignored. Default: cwd",
    )
    p.add_argument("--no-stack", action="store_true", help="Do not print related stack frames")

    args = p.parse_args(argv)
    roots = [os.path.abspath(w) for w in args.workspace] if args.workspace else [os.getcwd()]
    registry = ToolRegistry(default_tools(roots))

    try:
        records = asyncio.run(
            registry.parse(args.tool, Path(args.log_path), include_related=not args.no_stack)
        )
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except (LogFormatError, UnknownToolError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    for r in records:
        print(f"{r.file}:{r.line} [{r.code}] {r.message}")
        for loc in r.related:
            print(f"    {loc.file}:{loc.line} {loc.message}")

    print(f"\nFound {len(records)} diagnostics.")


if __name__ == "__main__":
    main()
