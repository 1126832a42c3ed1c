"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_memcheck_server.core.config import WORKSPACE_ENV
from mcp_memcheck_server.core.models import DiagnosticRecord
from mcp_memcheck_server.tools.diagnostics import (
    get_config,
    get_registry,
    published_diagnostics_impl,
)

SAMPLE_VALGRIND_LOG = """\
<?xml version="1.0"?>
<valgrindoutput>
  <protocolversion>4</protocolversion>
  <tool>memcheck</tool>
  <error>
    <unique>0x0</unique>
    <tid>1</tid>
    <kind>InvalidFree</kind>
    <what>Invalid free() / delete / delete[] / realloc()</what>
    <stack>
      <frame>
        <ip>0x4C2EDEB</ip>
        <obj>/usr/lib/valgrind/vgpreload_memcheck-amd64-linux.so</obj>
        <fn>free</fn>
      </frame>
      <frame>
        <ip>0x40054E</ip>
        <obj>/home/user/project/a.out</obj>
        <fn>main</fn>
        <dir>/home/user/project</dir>
        <file>main.c</file>
        <line>10</line>
      </frame>
    </stack>
    <auxwhat>Address 0x5204040 is 0 bytes inside a block of size 16 free'd</auxwhat>
    <stack>
      <frame>
        <ip>0x4C2EDEB</ip>
        <fn>free</fn>
      </frame>
      <frame>
        <ip>0x400542</ip>
        <fn>main</fn>
        <dir>/home/user/project</dir>
        <file>main.c</file>
        <line>9</line>
      </frame>
    </stack>
  </error>
  <error>
    <unique>0x1</unique>
    <tid>1</tid>
    <kind>Leak_DefinitelyLost</kind>
    <xwhat>
      <text>128 bytes in 1 blocks are definitely lost in loss record 1 of 1</text>
      <leakedbytes>128</leakedbytes>
      <leakedblocks>1</leakedblocks>
    </xwhat>
    <stack>
      <frame>
        <ip>0x4C2DB8F</ip>
        <fn>malloc</fn>
      </frame>
      <frame>
        <ip>0x400537</ip>
        <fn>main</fn>
        <dir>/home/user/project</dir>
        <file>main.c</file>
        <line>10</line>
      </frame>
    </stack>
  </error>
</valgrindoutput>
"""

SAMPLE_LEAKSANITIZER_LOG = """\

=================================================================
==4242==ERROR: LeakSanitizer: detected memory leaks

Direct leak of 64 byte(s) in 1 object(s) allocated from:
    #0 0x7f3b2c2b6bc8 in malloc (/lib/x86_64-linux-gnu/libasan.so.5+0x10dbc8)
    #1 0x55d1c7a0b1a9 in make_buffer /home/user/project/buffer.c:12:19
    #2 0x55d1c7a0b2f0 in main /home/user/project/main.c:5:3

Direct leak of 32 byte(s) in 1 object(s) allocated from:
    #0 0x7f3b2c2b6bc8 in malloc (/lib/x86_64-linux-gnu/libasan.so.5+0x10dbc8)
    #1 0x55d1c7a0b1a9 in make_buffer /home/user/project/buffer.c:12:19
    #2 0x55d1c7a0b301 in main /home/user/project/main.c:6:3

SUMMARY: AddressSanitizer: 96 byte(s) leaked in 2 allocation(s).
"""


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://memcheck/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        roots = ", ".join(get_config().workspace_roots)
        return (
            "Resources:\n"
            "- app://memcheck/help\n"
            "- app://memcheck/tools\n"
            "- app://memcheck/schemas/diagnostic-record\n"
            "- app://memcheck/examples/valgrind-log\n"
            "- app://memcheck/examples/leaksanitizer-log\n"
            "- diagnostics://{tool} (diagnostics published by the last load)\n"
            f"\nWorkspace roots ({WORKSPACE_ENV}): {roots}\n"
        )

    @mcp.resource("app://memcheck/tools")
    def tools_resource() -> dict[str, Any]:
        """Return the registered tool pipelines."""
        registry = get_registry()
        out: dict[str, Any] = {}
        for name in registry.names():
            tool = registry.tool(name)
            out[name] = {
                "parser": type(tool.parser).__name__,
                "filters": [type(f).__name__ for f in tool.filters],
                "matcher": type(tool.matcher).__name__,
                "post_processors": [type(p).__name__ for p in tool.post_processors],
                "documentation": tool.parser.type_documentation(""),
            }
        return out

    @mcp.resource("app://memcheck/schemas/diagnostic-record")
    def diagnostic_record_schema() -> dict[str, Any]:
        """Return the JSON schema of published diagnostic records."""
        return DiagnosticRecord.model_json_schema()

    @mcp.resource("app://memcheck/examples/valgrind-log")
    def sample_valgrind_log() -> str:
        """Return a tiny Valgrind XML log for demos and tests."""
        return SAMPLE_VALGRIND_LOG

    @mcp.resource("app://memcheck/examples/leaksanitizer-log")
    def sample_leaksanitizer_log() -> str:
        """Return a tiny LeakSanitizer report for demos and tests."""
        return SAMPLE_LEAKSANITIZER_LOG

    @mcp.resource("diagnostics://{tool}")
    def published(tool: str) -> dict[str, Any]:
        """Return the diagnostics currently published for a tool."""
        return published_diagnostics_impl(tool=tool)
