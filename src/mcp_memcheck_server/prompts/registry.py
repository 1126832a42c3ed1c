"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def explain_diagnostics(tool: str, log_path: str) -> list[dict[str, Any]]:
        """Build a prompt that walks through the diagnostics of a memory-checker log."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a C/C++ memory-safety reviewer. Explain memory-checker findings "
                    "precisely and tie every statement to a reported file and line. "
                    "Do not invent details; if the evidence is insufficient, say so."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Review the memory-checker log using load_diagnostics. Follow this workflow:\n"
                    "- Always call load_diagnostics first with the parameters below.\n"
                    "- Group findings by file; within a file, order them by line.\n"
                    "- For each finding, use its code and documentation link to name the defect "
                    "class, and use the related locations to explain how execution got there.\n"
                    "- If no diagnostics are returned, state that clearly; the log may be "
                    "incomplete or every frame may be outside the workspace.\n\n"
                    "Call load_diagnostics with:\n"
                    f"- tool: {tool}\n"
                    f"- log_path: {log_path}\n"
                    "- include_stack: true\n\n"
                    "Return this structure:\n"
                    "1) Findings (one bullet per file:line with the code)\n"
                    "2) Most severe issue and why (1-2 sentences)\n"
                    "3) Next actions (2-4 bullets)\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": "Previously published diagnostics for this tool are available at:",
                    },
                    {"type": "resource", "uri": f"diagnostics://{tool}"},
                ],
            },
        ]

    @mcp.prompt()
    def fix_leak(file: str, line: int, tool: str = "valgrind") -> list[dict[str, Any]]:
        """Build a prompt that proposes a fix for a leak reported at file:line."""
        return [
            {
                "role": "system",
                "content": (
                    "You fix memory leaks in C and C++ code. Propose the smallest change that "
                    "releases the allocation on every path, and keep ownership explicit."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"A leak was reported at {file}:{line}.\n"
                    f"Use get_diagnostics with tool={tool} to read the finding and its "
                    "related locations, then propose a patch. If the leak is an aggregate "
                    "(several allocations merged), address every allocation site."
                ),
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Published diagnostics:"},
                    {"type": "resource", "uri": f"diagnostics://{tool}"},
                ],
            },
        ]
