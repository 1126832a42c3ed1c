"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (load a memory-checker log, read published diagnostics)
- Resources: addressable data blobs (e.g., published diagnostics via URI)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_memcheck_server.server.memcheck_server
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_memcheck_server.prompts.registry import register_prompts
from mcp_memcheck_server.resources.registry import register_resources
from mcp_memcheck_server.tools.diagnostics import (
    get_config,
    load_diagnostics_impl,
    published_diagnostics_impl,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure logging on stderr; stdout carries the MCP transport."""
    level = getattr(logging, get_config().log_level, logging.INFO)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("memcheck-diagnostics", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def load_diagnostics(
    tool: str,
    log_path: str,
    include_stack: bool | None = None,
) -> dict[str, Any]:
    """Parse a memory-checker log and publish its positioned diagnostics.

    Parameters
    ----------
    tool:
        Pipeline to use: "valgrind" (XML log from --xml=yes --xml-file=...) or
        "leaksanitizer" (text report of a LeakSanitizer/AddressSanitizer run).
    log_path:
        Path to the complete log file.
    include_stack:
        Whether to attach the remaining stack frames to each diagnostic.
        Defaults to MEMCHECK_INCLUDE_STACK (true when unset).

    Returns
    -------
    dict:
        {"tool": str, "count": int, "files": {file: list[dict]}}
    """
    return await load_diagnostics_impl(tool=tool, log_path=log_path, include_stack=include_stack)


@mcp.tool()
def get_diagnostics(tool: str) -> dict[str, Any]:
    """Return the diagnostics published by the last load of a tool."""
    return published_diagnostics_impl(tool=tool)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
