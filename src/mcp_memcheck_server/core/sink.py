"""Per-tool output sink holding the published diagnostic records."""

from __future__ import annotations

from typing import Protocol

from .models import DiagnosticRecord


class DiagnosticSink(Protocol):
    """Where a runner publishes records; one sink per tool name."""

    name: str

    def clear(self) -> None: ...

    def get(self, file: str) -> list[DiagnosticRecord] | None: ...

    def set(self, file: str, records: list[DiagnosticRecord]) -> None: ...


class DiagnosticCollection:
    """In-memory sink: file -> ordered records, replaced wholesale on every pass."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._by_file: dict[str, list[DiagnosticRecord]] = {}

    def clear(self) -> None:
        self._by_file.clear()

    def get(self, file: str) -> list[DiagnosticRecord] | None:
        return self._by_file.get(file)

    def set(self, file: str, records: list[DiagnosticRecord]) -> None:
        self._by_file[file] = list(records)

    def records(self) -> list[DiagnosticRecord]:
        """All records in publication order."""
        return [r for records in self._by_file.values() for r in records]

    def __len__(self) -> int:
        return sum(len(records) for records in self._by_file.values())
