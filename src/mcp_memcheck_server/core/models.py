"""Core data models for memory-checker diagnostics."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .filters import Filter
    from .matchers import Matcher
    from .parsers.base import Parser
    from .postprocessors import PostProcessor


class DiagnosticKind(str, Enum):
    """Discriminator for the diagnostic variants."""

    LEAK = "leak"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class Position:
    """Source location a diagnostic is attached to (1-based line)."""

    file: str
    line: int


@dataclass(slots=True)
class Frame:
    """One stack entry, possibly missing debug information."""

    ip: int
    file: str | None = None
    function: str | None = None
    line: int | None = None
    obj: str | None = None  # object file / shared module
    msg: str | None = None
    auxmsg: str | None = None  # explanatory text shown with this frame


StackTrace = list[Frame]


@dataclass(slots=True)
class GenericDiagnostic:
    """Defect without byte-count semantics (invalid read, invalid free, ...)."""

    kind: ClassVar[DiagnosticKind] = DiagnosticKind.GENERIC

    type: str
    msg: str
    stack_trace: StackTrace = field(default_factory=list)


@dataclass(slots=True)
class LeakDiagnostic:
    """Leaked allocation(s) with the number of bytes lost."""

    kind: ClassVar[DiagnosticKind] = DiagnosticKind.LEAK

    type: str
    msg: str
    leaked_bytes: int
    stack_trace: StackTrace = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.leaked_bytes < 0:
            raise ValueError("leaked_bytes must be >= 0")


Diagnostic = GenericDiagnostic | LeakDiagnostic

GroupedDiagnostics = dict[Position, list[Diagnostic]]


@dataclass(frozen=True, slots=True)
class Tool:
    """Pipeline bundle for one log format."""

    parser: Parser
    filters: Sequence[Filter]
    matcher: Matcher
    post_processors: Sequence[PostProcessor]


class RelatedLocation(BaseModel):
    file: str = Field(description="Source file of the stack frame.")
    line: int = Field(ge=1, description="1-based line number.")
    message: str = Field(description="Frame rendering, prefixed by its auxiliary message.")


class DiagnosticRecord(BaseModel):
    """Positioned diagnostic as published to consumers."""

    file: str = Field(description="Source file the diagnostic is anchored to.")
    line: int = Field(ge=1, description="1-based line number.")
    message: str
    code: str = Field(description="Tool-defined classification (e.g. Leak_DefinitelyLost).")
    documentation: str = Field(description="Reference URL for the classification.")
    source: str = Field(description="Name of the tool pipeline that produced the record.")
    related: list[RelatedLocation] = Field(default_factory=list)
