from __future__ import annotations

import pytest

from mcp_memcheck_server.core.filters import WorkspaceFilter
from mcp_memcheck_server.core.models import Frame, GenericDiagnostic
from mcp_memcheck_server.core.runner import apply_filters


def _frames(*specs: tuple[str | None, str | None]) -> list[Frame]:
    return [Frame(ip=i, file=file, line=i + 1, auxmsg=aux) for i, (file, aux) in enumerate(specs)]


def _run(f: WorkspaceFilter, frames: list[Frame]) -> list[Frame]:
    f.reset()
    return [fr for fr in frames if f.filter_stack_trace(fr)]


def test_workspace_filter_keeps_only_workspace_frames() -> None:
    f = WorkspaceFilter(roots=["/ws"])
    frames = _frames(("/usr/lib/libc.c", None), ("/ws/a.c", None), (None, None), ("/ws/sub/b.c", None))

    kept = _run(f, frames)

    assert [fr.file for fr in kept] == ["/ws/a.c", "/ws/sub/b.c"]


def test_workspace_filter_rejects_sibling_prefix() -> None:
    f = WorkspaceFilter(roots=["/ws"])
    assert f.contains("/ws/a.c")
    assert not f.contains("/ws2/a.c")
    assert not f.contains("/ws/../etc/passwd")


def test_workspace_filter_relative_paths_are_out_of_scope() -> None:
    f = WorkspaceFilter(roots=["/ws", "/other"])
    assert not f.contains("src/a.c")
    assert not f.contains("vg_replace_malloc.c")
    assert f.contains("/other/b.c")


def test_workspace_filter_carries_aux_message_to_next_frame() -> None:
    f = WorkspaceFilter(roots=["/ws"])
    frames = _frames(("/usr/lib/x.c", "freed here"), ("/ws/a.c", None))

    kept = _run(f, frames)

    assert len(kept) == 1
    assert kept[0].auxmsg == "freed here"


def test_workspace_filter_carries_aux_message_across_several_dropped_frames() -> None:
    f = WorkspaceFilter(roots=["/ws"])
    frames = _frames(("/usr/lib/x.c", "allocated here"), (None, None), ("/ws/a.c", "own"))

    kept = _run(f, frames)

    assert [fr.auxmsg for fr in kept] == ["allocated here own"]


def test_workspace_filter_drops_aux_message_without_following_frame() -> None:
    f = WorkspaceFilter(roots=["/ws"])
    frames = _frames(("/ws/a.c", None), ("/usr/lib/x.c", "lost"))

    kept = _run(f, frames)

    assert [fr.auxmsg for fr in kept] == [None]


def test_workspace_filter_reset_forgets_carried_message() -> None:
    f = WorkspaceFilter(roots=["/ws"])
    f.filter_stack_trace(Frame(ip=1, file="/usr/x.c", auxmsg="stale"))
    f.reset()
    frame = Frame(ip=2, file="/ws/a.c")

    assert f.filter_stack_trace(frame)
    assert frame.auxmsg is None


def test_workspace_filter_requires_roots() -> None:
    with pytest.raises(ValueError):
        WorkspaceFilter(roots=[])


def test_apply_filters_drops_diagnostics_without_workspace_frames() -> None:
    inside = GenericDiagnostic(type="InvalidRead", msg="in", stack_trace=_frames(("/lib/x.c", None), ("/ws/a.c", None)))
    outside = GenericDiagnostic(type="InvalidRead", msg="out", stack_trace=_frames(("/lib/x.c", None)))

    kept = apply_filters([inside, outside], [WorkspaceFilter(roots=["/ws"])])

    assert [d.msg for d in kept] == ["in"]
    assert [fr.file for fr in kept[0].stack_trace] == ["/ws/a.c"]


def test_apply_filters_does_not_leak_state_between_diagnostics() -> None:
    first = GenericDiagnostic(type="T", msg="a", stack_trace=_frames(("/ws/a.c", None), ("/lib/x.c", "aux")))
    second = GenericDiagnostic(type="T", msg="b", stack_trace=_frames(("/ws/b.c", None)))

    kept = apply_filters([first, second], [WorkspaceFilter(roots=["/ws"])])

    assert kept[1].stack_trace[0].auxmsg is None


def test_apply_filters_never_grows_or_reorders_traces() -> None:
    frames = _frames(("/ws/c.c", None), ("/lib/x.c", None), ("/ws/a.c", None), ("/ws/b.c", None))
    before = [fr.file for fr in frames]
    diagnostic = GenericDiagnostic(type="T", msg="m", stack_trace=frames)

    (kept,) = apply_filters([diagnostic], [WorkspaceFilter(roots=["/ws"])])
    after = [fr.file for fr in kept.stack_trace]

    assert len(after) <= len(before)
    assert after == [f for f in before if f in after]
