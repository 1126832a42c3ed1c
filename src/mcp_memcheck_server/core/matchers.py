"""Matchers pick the source position a diagnostic is shown at."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .models import Diagnostic, Frame, Position


class Matcher(Protocol):
    """Matcher interface: return the anchor Position, or None if there is none."""

    def match(self, diagnostic: Diagnostic) -> Position | None:
        """Select the position for a (filtered) diagnostic."""
        ...


def anchor_frame(diagnostic: Diagnostic) -> Frame | None:
    """Return the first frame carrying both a file and a line."""
    for frame in diagnostic.stack_trace:
        if frame.file and frame.line:
            return frame
    return None


@dataclass(frozen=True, slots=True)
class DeepestFrameMatcher:
    """Anchor on the first frame with a known file and line.

    The anchor frame's message is appended to the diagnostic message.
    """

    def match(self, diagnostic: Diagnostic) -> Position | None:
        frame = anchor_frame(diagnostic)
        if frame is None:
            return None
        if frame.msg:
            diagnostic.msg += f" {frame.msg}"
        return Position(file=frame.file, line=frame.line)
