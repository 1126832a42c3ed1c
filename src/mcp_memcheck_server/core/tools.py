"""Tool registry: binds a tool name to its pipeline, runner and sink."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from .errors import UnknownToolError
from .filters import WorkspaceFilter
from .matchers import DeepestFrameMatcher
from .models import DiagnosticRecord, Tool
from .parsers import LeakSanitizerParser, ValgrindParser
from .parsers.base import LogSource
from .postprocessors import LeakCompacter
from .runner import Runner
from .sink import DiagnosticCollection

logger = logging.getLogger(__name__)

VALGRIND_LEAK_TEMPLATE = "${leakedBytes} are ${type} at ${function} ${ip}"
LEAKSANITIZER_LEAK_TEMPLATE = "${type} of ${leakedBytes} byte(s) allocated in ${function} (${ip})"


def default_tools(workspace_roots: Sequence[str]) -> dict[str, Tool]:
    """Pipelines for the supported log formats."""
    return {
        "valgrind": Tool(
            parser=ValgrindParser(),
            filters=[WorkspaceFilter(roots=workspace_roots)],
            matcher=DeepestFrameMatcher(),
            post_processors=[LeakCompacter(VALGRIND_LEAK_TEMPLATE)],
        ),
        "leaksanitizer": Tool(
            parser=LeakSanitizerParser(),
            filters=[WorkspaceFilter(roots=workspace_roots)],
            matcher=DeepestFrameMatcher(),
            post_processors=[LeakCompacter(LEAKSANITIZER_LEAK_TEMPLATE)],
        ),
    }


class ToolRegistry:
    """Owns one Runner and one sink per tool name, created on first use."""

    def __init__(
        self,
        tools: Mapping[str, Tool],
        *,
        sink_factory: Callable[[str], DiagnosticCollection] = DiagnosticCollection,
    ) -> None:
        self._tools = dict(tools)
        self._sink_factory = sink_factory
        self._runners: dict[str, Runner] = {}

    def names(self) -> list[str]:
        return list(self._tools)

    def tool(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name, self.names()) from None

    def runner(self, name: str) -> Runner:
        """Return the runner for a tool, creating it (and its sink) lazily."""
        runner = self._runners.get(name)
        if runner is None:
            runner = Runner(self.tool(name), self._sink_factory(name))
            self._runners[name] = runner
            logger.debug("Created runner for tool %s", name)
        return runner

    def collection(self, name: str) -> DiagnosticCollection | None:
        """Return the tool's sink, or None before its first pass."""
        if name not in self._tools:
            raise UnknownToolError(name, self.names())
        runner = self._runners.get(name)
        return runner.sink if runner is not None else None

    async def parse(
        self, name: str, log: LogSource, *, include_related: bool = True
    ) -> list[DiagnosticRecord]:
        """Run a full pass of the named tool over a log."""
        return await self.runner(name).parse(log, include_related=include_related)
