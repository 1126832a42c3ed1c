"""Post-processors run on diagnostics grouped by position."""

from __future__ import annotations

from dataclasses import dataclass
from string import Template
from typing import Protocol

from .models import Diagnostic, Frame, GroupedDiagnostics, LeakDiagnostic


class PostProcessor(Protocol):
    """Post-processor interface: rewrite the grouped diagnostics."""

    def process(self, diagnostics: GroupedDiagnostics) -> GroupedDiagnostics:
        """Return the processed mapping (may be the same object)."""
        ...


@dataclass(frozen=True, slots=True)
class LeakCompacter:
    """Merge same-type leaks reported at the same position.

    ``template`` may reference ``${leakedBytes}``, ``${type}``, ``${function}``
    and ``${ip}``; the last two come from the first frame of the first leak
    of that type at the position.
    """

    template: str

    def process(self, diagnostics: GroupedDiagnostics) -> GroupedDiagnostics:
        for position, items in diagnostics.items():
            diagnostics[position] = self._compact(items)
        return diagnostics

    def _compact(self, items: list[Diagnostic]) -> list[Diagnostic]:
        compacted: list[Diagnostic] = []
        # type -> (aggregate, first frame of the aggregate before it was cleared)
        leaks: dict[str, tuple[LeakDiagnostic, Frame | None]] = {}

        for diagnostic in items:
            if not isinstance(diagnostic, LeakDiagnostic):
                compacted.append(diagnostic)
                continue

            previous = leaks.get(diagnostic.type)
            if previous is None:
                first = diagnostic.stack_trace[0] if diagnostic.stack_trace else None
                leaks[diagnostic.type] = (diagnostic, first)
                compacted.append(diagnostic)
                continue

            aggregate, first = previous
            aggregate.leaked_bytes += diagnostic.leaked_bytes
            aggregate.msg = self.render(aggregate, first)
            aggregate.stack_trace = []

        return compacted

    def render(self, aggregate: LeakDiagnostic, frame: Frame | None) -> str:
        """Render the aggregate message from the template."""
        return Template(self.template).safe_substitute(
            leakedBytes=aggregate.leaked_bytes,
            type=aggregate.type,
            function=(frame.function if frame and frame.function else "unknown"),
            ip=(format(frame.ip, "x") if frame else "unknown"),
        )
