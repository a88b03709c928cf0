"""Report sinks — the append-only audit trail of a redaction run.

The pipeline only needs the three methods on ReportSink.  ListReport keeps
everything in memory (handy for tests and for printing), TextReport appends
to a file on disk:

    === /var/log/app/audit.log
    Replaced, 12, true, rule 'plain-username'
    Not Replaced, 40, false, rule 'email' (detect only)
    --- Completed /var/log/app/audit.log
"""

from __future__ import annotations
from pathlib import Path
from typing import Protocol


class ReportSink(Protocol):
    def append_section_start(self, label: str) -> None: ...
    def append(self, entry: str) -> None: ...
    def append_section_end(self, label: str) -> None: ...


class ListReport:
    """In-memory report."""

    __slots__ = ("records",)

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []   # (kind, text)

    def append_section_start(self, label: str) -> None:
        self.records.append(("start", label))

    def append(self, entry: str) -> None:
        self.records.append(("entry", entry))

    def append_section_end(self, label: str) -> None:
        self.records.append(("end", label))

    @property
    def entries(self) -> list[str]:
        return [text for kind, text in self.records if kind == "entry"]

    @property
    def lines(self) -> list[str]:
        """Render the records the same way TextReport writes them."""
        return [_render(kind, text) for kind, text in self.records]


class TextReport:
    """Report written line by line to a UTF-8 text file."""

    __slots__ = ("_path", "_fh")

    def __init__(self, path: str | Path, *, append: bool = True) -> None:
        self._path = Path(path).expanduser()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self._path, "a" if append else "w", encoding="utf-8")

    @property
    def path(self) -> Path:
        return self._path

    def _write(self, kind: str, text: str) -> None:
        self._fh.write(_render(kind, text) + "\n")

    def append_section_start(self, label: str) -> None:
        self._write("start", label)

    def append(self, entry: str) -> None:
        self._write("entry", entry)

    def append_section_end(self, label: str) -> None:
        self._write("end", label)
        self._fh.flush()

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> "TextReport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _render(kind: str, text: str) -> str:
    if kind == "start":
        return f"=== {text}"
    if kind == "end":
        return f"--- Completed {text}"
    return text
