"""Parser interface and raw log loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

import aiofiles

from ..models import Diagnostic

# Raw content (bytes/str) or a path to a log file.
LogSource = bytes | str | os.PathLike[str]


class Parser(Protocol):
    """Parser interface: turn one complete tool log into diagnostics."""

    async def parse(self, log: LogSource) -> list[Diagnostic]:
        """Parse a raw log (or the file it lives in) into ordered diagnostics."""
        ...

    def type_documentation(self, type_: str) -> str:
        """Return a reference URL for a diagnostic classification."""
        ...


async def read_log(log: LogSource) -> bytes:
    """Return the raw bytes of a log, reading it from disk when given a path."""
    if isinstance(log, bytes):
        return log
    if isinstance(log, str):
        return log.encode("utf-8")

    path = Path(log)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")
    async with aiofiles.open(path, mode="rb") as f:
        return await f.read()
