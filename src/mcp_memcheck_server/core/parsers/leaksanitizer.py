"""LeakSanitizer text report parser."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..models import Diagnostic, Frame, LeakDiagnostic, StackTrace
from .base import LogSource, read_log

logger = logging.getLogger(__name__)

DOCUMENTATION_URL = "https://github.com/google/sanitizers/wiki/AddressSanitizerLeakSanitizer"


@dataclass(frozen=True, slots=True)
class LeakSanitizerParser:
    """Parse the leak section of a LeakSanitizer/AddressSanitizer report."""

    # Everything between the detection banner and the SUMMARY line.
    _region = re.compile(
        r"==\d+==ERROR: LeakSanitizer: detected memory leaks[^\n]*\n(?P<body>.*)(?=SUMMARY)",
        re.DOTALL,
    )

    _header = re.compile(
        r"^\s*(?P<message>(?P<type>\w[\w ]*?) of (?P<leaked>\d+) byte\(s\) "
        r"in \d+ object\(s\) allocated) from:"
    )

    # #1 0x55d1c7a0b1a9 in main /home/user/proj/main.c:5:13
    _frame_line = re.compile(
        r"^\s*#(?P<n>\d+)\s+(?P<ip>0x[0-9a-fA-F]+)\s+in\s+(?P<function>.+?)\s+"
        r"(?P<file>\S+?):(?P<line>\d+)(?::\d+)?\s*$"
    )

    # #0 0x7f3b2c2b6bc8 in malloc (/lib/x86_64-linux-gnu/libasan.so.5+0x10dbc8)
    _frame_offset = re.compile(
        r"^\s*#(?P<n>\d+)\s+(?P<ip>0x[0-9a-fA-F]+)\s+in\s+(?P<function>.+?)\s+"
        r"\((?P<module>[^()+]+)\+(?P<offset>0x[0-9a-fA-F]+)\)\s*$"
    )

    async def parse(self, log: LogSource) -> list[Diagnostic]:
        """Parse a LeakSanitizer report (raw content or path)."""
        return self.parse_bytes(await read_log(log))

    def parse_bytes(self, data: bytes) -> list[Diagnostic]:
        """Parse raw report bytes; a report without a complete leak section yields nothing."""
        report = data.decode("utf-8", errors="replace").replace("\r\n", "\n")
        m = self._region.search(report)
        if not m:
            logger.info("No complete LeakSanitizer leak section found")
            return []

        diagnostics: list[Diagnostic] = []
        for entry in re.split(r"\n[ \t]*\n", m.group("body").strip()):
            diagnostic = self._parse_entry(entry)
            if diagnostic is not None:
                diagnostics.append(diagnostic)

        logger.info("Parsed %d LeakSanitizer diagnostic(s)", len(diagnostics))
        return diagnostics

    def _parse_entry(self, entry: str) -> LeakDiagnostic | None:
        lines = entry.split("\n")
        header = self._header.match(lines[0])
        if not header:
            logger.debug("Skipping unrecognized leak entry: %r", lines[0])
            return None

        stack_trace: StackTrace = []
        for line in lines[1:]:
            frame = self._parse_frame(line)
            if frame is not None:
                stack_trace.append(frame)

        return LeakDiagnostic(
            type=header.group("type").strip(),
            msg=header.group("message").strip(),
            leaked_bytes=int(header.group("leaked")),
            stack_trace=stack_trace,
        )

    def _parse_frame(self, line: str) -> Frame | None:
        m = self._frame_line.match(line)
        if m:
            return Frame(
                ip=int(m.group("ip"), 16),
                file=m.group("file"),
                function=m.group("function"),
                line=int(m.group("line")),
                msg=f"in {m.group('function')} ({m.group('ip').lower()})",
            )

        m = self._frame_offset.match(line)
        if m:
            return Frame(
                ip=int(m.group("ip"), 16),
                # No line: the module can keep a frame in scope but never anchors it.
                file=m.group("module"),
                function=m.group("function"),
                obj=m.group("module"),
                msg=f"in {m.group('function')} ({m.group('ip').lower()})",
            )

        return None

    def type_documentation(self, type_: str) -> str:
        """All leak kinds share the LeakSanitizer wiki page."""
        return DOCUMENTATION_URL
