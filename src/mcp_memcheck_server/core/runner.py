"""Pipeline orchestration.

One pass turns a raw log into published records:
parse -> filter -> match/group -> post-process -> emit.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .filters import Filter
from .matchers import Matcher, anchor_frame
from .models import (
    Diagnostic,
    DiagnosticRecord,
    GroupedDiagnostics,
    Position,
    RelatedLocation,
    Tool,
)
from .parsers.base import LogSource
from .sink import DiagnosticSink

logger = logging.getLogger(__name__)


def apply_filters(diagnostics: list[Diagnostic], filters: Iterable[Filter]) -> list[Diagnostic]:
    """Run each filter over every trace (resetting per trace), then over diagnostics."""
    for f in filters:
        for diagnostic in diagnostics:
            f.reset()
            diagnostic.stack_trace = [fr for fr in diagnostic.stack_trace if f.filter_stack_trace(fr)]

        f.reset()
        diagnostics = [d for d in diagnostics if f.filter_diagnostics(d)]
    return diagnostics


def group_by_position(diagnostics: Iterable[Diagnostic], matcher: Matcher) -> GroupedDiagnostics:
    """Group diagnostics by matched position; unmatched ones are dropped."""
    grouped: GroupedDiagnostics = {}
    for diagnostic in diagnostics:
        position = matcher.match(diagnostic)
        if position is None:
            logger.debug("Dropping diagnostic without position: %s", diagnostic.type)
            continue
        grouped.setdefault(position, []).append(diagnostic)
    return grouped


def _related_locations(diagnostic: Diagnostic) -> list[RelatedLocation]:
    """Frames with file and line other than the anchor, rendered for display."""
    anchor = anchor_frame(diagnostic)
    out: list[RelatedLocation] = []
    for frame in diagnostic.stack_trace:
        if frame is anchor or not frame.file or not frame.line:
            continue
        message = " ".join(m for m in (frame.auxmsg, frame.msg) if m)
        out.append(RelatedLocation(file=frame.file, line=frame.line, message=message))
    return out


class Runner:
    """Run one tool's pipeline and publish the result into its sink."""

    def __init__(self, tool: Tool, sink: DiagnosticSink) -> None:
        self.tool = tool
        self.sink = sink

    def _to_record(
        self, position: Position, diagnostic: Diagnostic, *, include_related: bool
    ) -> DiagnosticRecord:
        return DiagnosticRecord(
            file=position.file,
            line=position.line,
            message=diagnostic.msg,
            code=diagnostic.type,
            documentation=self.tool.parser.type_documentation(diagnostic.type),
            source=self.sink.name,
            related=_related_locations(diagnostic) if include_related else [],
        )

    async def parse(self, log: LogSource, *, include_related: bool = True) -> list[DiagnosticRecord]:
        """Run a full pass and replace the sink content with its records."""
        diagnostics = await self.tool.parser.parse(log)
        parsed = len(diagnostics)

        diagnostics = apply_filters(diagnostics, self.tool.filters)
        grouped = group_by_position(diagnostics, self.tool.matcher)

        for post_processor in self.tool.post_processors:
            grouped = post_processor.process(grouped)

        by_file: dict[str, list[DiagnosticRecord]] = {}
        records: list[DiagnosticRecord] = []
        for position, items in grouped.items():
            for diagnostic in items:
                record = self._to_record(position, diagnostic, include_related=include_related)
                by_file.setdefault(position.file, []).append(record)
                records.append(record)

        self.sink.clear()
        for file, file_records in by_file.items():
            self.sink.set(file, file_records)

        logger.info(
            "%s: %d parsed, %d kept after filtering, %d published at %d position(s)",
            self.sink.name,
            parsed,
            len(diagnostics),
            len(records),
            len(grouped),
        )
        return records
