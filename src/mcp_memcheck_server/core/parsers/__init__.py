"""Log parsers for the supported memory checkers.

Contains parsers for Valgrind XML logs and LeakSanitizer text reports.
"""

from __future__ import annotations

from .base import LogSource, Parser, read_log
from .leaksanitizer import LeakSanitizerParser
from .valgrind import ValgrindParser

__all__ = [
    "LeakSanitizerParser",
    "LogSource",
    "Parser",
    "ValgrindParser",
    "read_log",
]
