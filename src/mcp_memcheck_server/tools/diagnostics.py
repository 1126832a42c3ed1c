"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from mcp_memcheck_server.core.config import ServerConfig, resolve_server_config
from mcp_memcheck_server.core.models import DiagnosticRecord
from mcp_memcheck_server.core.tools import ToolRegistry, default_tools

_REGISTRY: ToolRegistry | None = None
_CONFIG: ServerConfig | None = None


def get_config() -> ServerConfig:
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = resolve_server_config()
    return _CONFIG


def get_registry() -> ToolRegistry:
    """Return the process-wide registry (built from the environment on first use)."""
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = ToolRegistry(default_tools(get_config().workspace_roots))
    return _REGISTRY


def reset_registry(registry: ToolRegistry | None = None, config: ServerConfig | None = None) -> None:
    """Replace (or drop) the process-wide registry and config."""
    global _REGISTRY, _CONFIG
    _REGISTRY = registry
    _CONFIG = config


def _group_records(records: Iterable[DiagnosticRecord]) -> dict[str, list[dict[str, Any]]]:
    """Group records per file as JSON-serializable dicts."""
    files: dict[str, list[dict[str, Any]]] = {}
    for r in records:
        files.setdefault(r.file, []).append(r.model_dump())
    return files


async def load_diagnostics_impl(
    *,
    tool: str,
    log_path: str,
    include_stack: bool | None = None,
) -> dict[str, Any]:
    """Implementation for the `load_diagnostics` MCP tool.

    Notes
    -----
    - The log format is implied by `tool`; it is never sniffed.
    - Every call replaces the diagnostics previously published for `tool`.
    - include_stack=None falls back to MEMCHECK_INCLUDE_STACK (default: true).
    """
    name = tool.strip().lower()
    if not name:
        raise ValueError("tool must not be empty")
    if include_stack is None:
        include_stack = get_config().include_related

    path = Path(log_path).expanduser()
    records = await get_registry().parse(name, path, include_related=include_stack)

    return {
        "tool": name,
        "count": len(records),
        "files": _group_records(records),
    }


def published_diagnostics_impl(*, tool: str) -> dict[str, Any]:
    """Implementation for the `get_diagnostics` MCP tool (no parsing)."""
    name = tool.strip().lower()
    collection = get_registry().collection(name)
    records = collection.records() if collection is not None else []
    return {
        "tool": name,
        "count": len(records),
        "files": _group_records(records),
    }
