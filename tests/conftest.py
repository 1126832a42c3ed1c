from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from mcp_memcheck_server.resources.registry import SAMPLE_LEAKSANITIZER_LOG, SAMPLE_VALGRIND_LOG

WORKSPACE = "/home/user/project"


@pytest.fixture
def workspace() -> str:
    return WORKSPACE


@pytest.fixture
def valgrind_log() -> bytes:
    return SAMPLE_VALGRIND_LOG.encode("utf-8")


@pytest.fixture
def leaksanitizer_log() -> bytes:
    return SAMPLE_LEAKSANITIZER_LOG.encode("utf-8")


@pytest.fixture
def valgrind_xml() -> Callable[..., bytes]:
    """Wrap <error> snippets into a complete Valgrind XML document."""

    def _build(*errors: str) -> bytes:
        body = "\n".join(errors)
        return (
            '<?xml version="1.0"?>\n'
            "<valgrindoutput>\n"
            "<protocolversion>4</protocolversion>\n"
            f"{body}\n"
            "</valgrindoutput>\n"
        ).encode("utf-8")

    return _build


@pytest.fixture
def write_log() -> Callable[[Path, bytes], None]:
    def _write(path: Path, data: bytes) -> None:
        path.write_bytes(data)

    return _write
