"""Errors raised by the diagnostics pipeline."""

from __future__ import annotations


class LogFormatError(ValueError):
    """Raised when the top-level shape of a tool log is not recognized."""


class UnknownToolError(ValueError):
    """Raised when a log is submitted for a tool name with no registered pipeline."""

    def __init__(self, name: str, known: list[str]) -> None:
        valid = ", ".join(known) or "<none>"
        super().__init__(f"Unknown tool '{name}'. Valid values: {valid}.")
        self.name = name
