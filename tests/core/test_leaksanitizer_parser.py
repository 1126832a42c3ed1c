from __future__ import annotations

from pathlib import Path

import pytest

from mcp_memcheck_server.core.models import LeakDiagnostic
from mcp_memcheck_server.core.parsers import LeakSanitizerParser
from mcp_memcheck_server.core.parsers.leaksanitizer import DOCUMENTATION_URL


def _report(*entries: str, summary: bool = True) -> bytes:
    parts = [
        "=================================================================",
        "==77==ERROR: LeakSanitizer: detected memory leaks",
        "",
        "\n\n".join(entries),
        "",
    ]
    if summary:
        parts.append("SUMMARY: AddressSanitizer: 1 byte(s) leaked in 1 allocation(s).")
    return ("\n".join(parts) + "\n").encode("utf-8")


def test_leaksanitizer_parser_sample(leaksanitizer_log: bytes) -> None:
    diagnostics = LeakSanitizerParser().parse_bytes(leaksanitizer_log)

    assert len(diagnostics) == 2
    assert all(isinstance(d, LeakDiagnostic) for d in diagnostics)
    assert [d.type for d in diagnostics] == ["Direct leak", "Direct leak"]
    assert [d.leaked_bytes for d in diagnostics] == [64, 32]
    assert diagnostics[0].msg == "Direct leak of 64 byte(s) in 1 object(s) allocated"

    malloc, make_buffer, main = diagnostics[0].stack_trace
    assert malloc.ip == 0x7F3B2C2B6BC8
    assert malloc.function == "malloc"
    assert malloc.file == "/lib/x86_64-linux-gnu/libasan.so.5"
    assert malloc.line is None
    assert malloc.obj == "/lib/x86_64-linux-gnu/libasan.so.5"
    assert make_buffer.file == "/home/user/project/buffer.c"
    assert make_buffer.line == 12
    assert make_buffer.msg == "in make_buffer (0x55d1c7a0b1a9)"
    assert main.line == 5
    assert all(f.auxmsg is None for f in diagnostics[0].stack_trace)


def test_leaksanitizer_parser_without_summary_yields_nothing(leaksanitizer_log: bytes) -> None:
    text = leaksanitizer_log.decode("utf-8")
    truncated = text[: text.index("SUMMARY")].encode("utf-8")

    assert LeakSanitizerParser().parse_bytes(truncated) == []


def test_leaksanitizer_parser_without_banner_yields_nothing() -> None:
    assert LeakSanitizerParser().parse_bytes(b"all good\nSUMMARY: nothing\n") == []


def test_leaksanitizer_parser_skips_unrecognized_entries_and_lines() -> None:
    log = _report(
        "Objects leaked above:\n0x602000000010 (8 bytes)",
        "Indirect leak of 8 byte(s) in 2 object(s) allocated from:\n"
        "    #0 0x4a in malloc (/usr/lib/libasan.so+0x1)\n"
        "    some unrelated text\n"
        "    #1 0x4b in Widget::make(int) /src/widget.cc:42",
    )
    (diagnostic,) = LeakSanitizerParser().parse_bytes(log)

    assert diagnostic.type == "Indirect leak"
    assert diagnostic.leaked_bytes == 8
    assert [f.function for f in diagnostic.stack_trace] == ["malloc", "Widget::make(int)"]
    assert diagnostic.stack_trace[1].file == "/src/widget.cc"
    assert diagnostic.stack_trace[1].line == 42


def test_leaksanitizer_parser_entry_without_frames() -> None:
    log = _report("Direct leak of 4 byte(s) in 1 object(s) allocated from:")
    (diagnostic,) = LeakSanitizerParser().parse_bytes(log)

    assert diagnostic.stack_trace == []


def test_leaksanitizer_parser_handles_crlf(leaksanitizer_log: bytes) -> None:
    crlf = leaksanitizer_log.replace(b"\n", b"\r\n")
    assert len(LeakSanitizerParser().parse_bytes(crlf)) == 2


def test_leaksanitizer_type_documentation() -> None:
    parser = LeakSanitizerParser()
    assert parser.type_documentation("Direct leak") == DOCUMENTATION_URL
    assert parser.type_documentation("anything") == DOCUMENTATION_URL


@pytest.mark.asyncio
async def test_leaksanitizer_parser_accepts_text_and_path(
    tmp_path: Path, leaksanitizer_log: bytes, write_log
) -> None:
    path = tmp_path / "asan.log"
    write_log(path, leaksanitizer_log)
    parser = LeakSanitizerParser()

    from_path = await parser.parse(path)
    from_text = await parser.parse(leaksanitizer_log.decode("utf-8"))

    assert from_path == from_text
    assert len(from_path) == 2
