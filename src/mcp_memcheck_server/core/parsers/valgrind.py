"""Valgrind (Memcheck) XML log parser.

Expects the output of ``valgrind --xml=yes --xml-file=...``: a ``valgrindoutput``
root holding one ``error`` element per reported defect.
"""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from ..errors import LogFormatError
from ..models import Diagnostic, Frame, GenericDiagnostic, LeakDiagnostic, StackTrace
from .base import LogSource, read_log

logger = logging.getLogger(__name__)

ROOT_TAG = "valgrindoutput"

_MANUAL = "https://www.valgrind.org/docs/manual/mc-manual.html"

_DOCUMENTATION = {
    "InvalidRead": f"{_MANUAL}#mc-manual.badrw",
    "InvalidWrite": f"{_MANUAL}#mc-manual.badrw",
    "UninitValue": f"{_MANUAL}#mc-manual.uninitvals",
    "UninitCondition": f"{_MANUAL}#mc-manual.uninitvals",
    "SyscallParam": f"{_MANUAL}#mc-manual.bad-syscall-args",
    "InvalidFree": f"{_MANUAL}#mc-manual.badfrees",
    "MismatchedFree": f"{_MANUAL}#mc-manual.rudefn",
    "Overlap": f"{_MANUAL}#mc-manual.overlap",
    "FishyValue": f"{_MANUAL}#mc-manual.fishyvalue",
    "Leak_DefinitelyLost": f"{_MANUAL}#mc-manual.leaks",
    "Leak_IndirectlyLost": f"{_MANUAL}#mc-manual.leaks",
    "Leak_PossiblyLost": f"{_MANUAL}#mc-manual.leaks",
    "Leak_StillReachable": f"{_MANUAL}#mc-manual.leaks",
}
_DEFAULT_DOCUMENTATION = f"{_MANUAL}#mc-manual.errormsgs"


def _parse_int(value: str | None, *, base: int = 10) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip(), base)
    except ValueError:
        return None


@dataclass(slots=True)
class _SymbolStats:
    """Counts frames seen vs. frames missing debug information."""

    seen: int = 0
    unresolved: int = 0

    @property
    def ratio(self) -> float:
        return self.unresolved / self.seen if self.seen else 0.0


@dataclass(frozen=True, slots=True)
class ValgrindParser:
    """Parse Memcheck XML logs into diagnostics."""

    unknown_type: str = "Unknown"

    async def parse(self, log: LogSource) -> list[Diagnostic]:
        """Parse a Valgrind XML log (raw content or path)."""
        return self.parse_bytes(await read_log(log))

    def parse_bytes(self, data: bytes) -> list[Diagnostic]:
        """Parse raw XML bytes; raise LogFormatError for unrecognized documents."""
        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            raise LogFormatError(f"Malformed Valgrind XML log: {exc}") from exc
        if root.tag != ROOT_TAG:
            raise LogFormatError(f"Expected <{ROOT_TAG}> root element, got <{root.tag}>")

        stats = _SymbolStats()
        diagnostics = [self._parse_error(error, stats) for error in root.iterfind("error")]

        logger.info("Parsed %d Valgrind diagnostic(s)", len(diagnostics))
        logger.debug(
            "Unresolved symbol ratio: %.2f (%d/%d frames)",
            stats.ratio,
            stats.unresolved,
            stats.seen,
        )
        return diagnostics

    def _parse_error(self, error: ET.Element, stats: _SymbolStats) -> Diagnostic:
        """Scan the children of one <error> in document order."""
        type_ = self.unknown_type
        msg = ""
        leaked_bytes: int | None = None
        auxmsg: str | None = None
        stack_trace: StackTrace = []

        for child in error:
            tag = child.tag
            if tag == "kind":
                type_ = (child.text or "").strip() or self.unknown_type
            elif tag == "what":
                msg = (child.text or "").strip()
            elif tag == "xwhat":
                msg = (child.findtext("text") or "").strip()
                leaked = _parse_int(child.findtext("leakedbytes"))
                if leaked is not None:
                    leaked_bytes = leaked
            elif tag == "auxwhat":
                auxmsg = (child.text or "").strip() or None
            elif tag == "xauxwhat":
                auxmsg = (child.findtext("text") or "").strip() or None
            elif tag == "stack":
                for frame_el in child.iterfind("frame"):
                    frame = self._parse_frame(frame_el, stats)
                    if frame is None:
                        continue
                    # Pending aux message belongs to the next frame only.
                    frame.auxmsg = auxmsg
                    auxmsg = None
                    stack_trace.append(frame)

        if leaked_bytes is not None:
            return LeakDiagnostic(
                type=type_, msg=msg, leaked_bytes=leaked_bytes, stack_trace=stack_trace
            )
        return GenericDiagnostic(type=type_, msg=msg, stack_trace=stack_trace)

    @staticmethod
    def _parse_frame(frame_el: ET.Element, stats: _SymbolStats) -> Frame | None:
        """Build a Frame from a <frame> element; None when the ip is unusable."""
        ip_text = (frame_el.findtext("ip") or "").strip()
        ip = _parse_int(ip_text, base=16)
        if ip is None:
            logger.debug("Skipping frame with invalid ip %r", ip_text)
            return None

        fn = frame_el.findtext("fn")
        dir_ = frame_el.findtext("dir")
        file = frame_el.findtext("file")
        line_text = frame_el.findtext("line")
        obj = frame_el.findtext("obj")

        stats.seen += 1
        if not fn or not dir_ or not file or not line_text:
            stats.unresolved += 1

        path: str | None = None
        if file:
            path = os.path.normpath(os.path.join(dir_, file) if dir_ else file)

        line = _parse_int(line_text)
        if line is not None and line < 1:
            line = None

        return Frame(
            ip=ip,
            file=path,
            function=fn or None,
            line=line,
            obj=obj or None,
            msg=f"at {fn or 'unknown'} ({ip_text.lower()})",
        )

    def type_documentation(self, type_: str) -> str:
        """Return the Memcheck manual section for an error kind."""
        return _DOCUMENTATION.get(type_, _DEFAULT_DOCUMENTATION)
