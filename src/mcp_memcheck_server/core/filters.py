"""Stack-trace and diagnostic filters."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Protocol

from .models import Diagnostic, Frame


class Filter(Protocol):
    """Filter interface.

    ``filter_stack_trace`` is called for every frame of one trace, in order,
    between two ``reset`` calls; ``filter_diagnostics`` decides whether the
    (already frame-filtered) diagnostic survives.
    """

    def reset(self) -> None:
        """Forget state carried across the frames of the previous trace."""
        ...

    def filter_stack_trace(self, frame: Frame) -> bool:
        """Return True to keep the frame."""
        ...

    def filter_diagnostics(self, diagnostic: Diagnostic) -> bool:
        """Return True to keep the diagnostic."""
        ...


@dataclass(slots=True)
class _CarryState:
    """Aux message waiting for the next frame after its own frame was dropped."""

    auxmsg: str | None = None

    def take(self) -> str | None:
        msg, self.auxmsg = self.auxmsg, None
        return msg


@dataclass(slots=True)
class WorkspaceFilter:
    """Exclude frames whose file is outside the workspace roots."""

    roots: Sequence[str]
    _state: _CarryState = field(default_factory=_CarryState, init=False, repr=False)
    _roots: tuple[PurePath, ...] = field(default=(), init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.roots:
            raise ValueError("WorkspaceFilter needs at least one root")
        self._roots = tuple(PurePath(os.path.abspath(r)) for r in self.roots)

    def contains(self, file: str) -> bool:
        """Return True when the absolute path lies under one of the roots.

        Relative paths (a bare ``vg_replace_malloc.c``) are never in scope.
        """
        if not os.path.isabs(file):
            return False
        path = PurePath(os.path.normpath(file))
        return any(path == root or root in path.parents for root in self._roots)

    def reset(self) -> None:
        self._state = _CarryState()

    def filter_stack_trace(self, frame: Frame) -> bool:
        carried = self._state.take()
        if carried is not None:
            frame.auxmsg = f"{carried} {frame.auxmsg}" if frame.auxmsg else carried

        if frame.file is not None and self.contains(frame.file):
            return True

        # Move the aux message to the next frame.
        self._state.auxmsg = frame.auxmsg
        return False

    def filter_diagnostics(self, diagnostic: Diagnostic) -> bool:
        # An empty trace means no frame belonged to the workspace.
        return len(diagnostic.stack_trace) != 0
