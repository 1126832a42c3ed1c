from __future__ import annotations

from mcp_memcheck_server.core.models import Frame, GenericDiagnostic, LeakDiagnostic, Position
from mcp_memcheck_server.core.postprocessors import LeakCompacter
from mcp_memcheck_server.core.tools import LEAKSANITIZER_LEAK_TEMPLATE, VALGRIND_LEAK_TEMPLATE

POS = Position(file="/ws/main.c", line=10)


def _leak(n: int, type_: str = "Leak_DefinitelyLost", function: str | None = "main") -> LeakDiagnostic:
    return LeakDiagnostic(
        type=type_,
        msg=f"{n} bytes lost",
        leaked_bytes=n,
        stack_trace=[Frame(ip=0x400537, file="/ws/main.c", line=10, function=function)],
    )


def test_leak_compacter_sums_same_type_leaks() -> None:
    grouped = {POS: [_leak(10), _leak(20), _leak(30)]}

    out = LeakCompacter(VALGRIND_LEAK_TEMPLATE).process(grouped)

    (aggregate,) = out[POS]
    assert isinstance(aggregate, LeakDiagnostic)
    assert aggregate.leaked_bytes == 60
    assert aggregate.msg == "60 are Leak_DefinitelyLost at main 400537"
    assert aggregate.stack_trace == []


def test_leak_compacter_leaves_single_leak_untouched() -> None:
    leak = _leak(16)
    out = LeakCompacter(VALGRIND_LEAK_TEMPLATE).process({POS: [leak]})

    assert out[POS] == [leak]
    assert leak.msg == "16 bytes lost"
    assert len(leak.stack_trace) == 1


def test_leak_compacter_keeps_types_and_generics_apart() -> None:
    generic = GenericDiagnostic(type="InvalidFree", msg="Invalid free()")
    grouped = {
        POS: [
            _leak(8),
            generic,
            _leak(4, type_="Leak_PossiblyLost"),
            _leak(8),
        ]
    }

    out = LeakCompacter(VALGRIND_LEAK_TEMPLATE).process(grouped)

    assert [d.type for d in out[POS]] == ["Leak_DefinitelyLost", "InvalidFree", "Leak_PossiblyLost"]
    assert out[POS][0].leaked_bytes == 16
    assert out[POS][1] is generic
    assert out[POS][2].leaked_bytes == 4


def test_leak_compacter_positions_are_independent() -> None:
    other = Position(file="/ws/other.c", line=3)
    out = LeakCompacter(VALGRIND_LEAK_TEMPLATE).process({POS: [_leak(1)], other: [_leak(2)]})

    assert [d.leaked_bytes for d in out[POS]] == [1]
    assert [d.leaked_bytes for d in out[other]] == [2]


def test_leak_compacter_uses_first_leak_frame_and_unknown_function() -> None:
    grouped = {POS: [_leak(64, type_="Direct leak", function=None), _leak(32, type_="Direct leak")]}

    out = LeakCompacter(LEAKSANITIZER_LEAK_TEMPLATE).process(grouped)

    assert out[POS][0].msg == "Direct leak of 96 byte(s) allocated in unknown (400537)"


def test_leak_compacter_empty_input() -> None:
    assert LeakCompacter(VALGRIND_LEAK_TEMPLATE).process({}) == {}
