"""Core types."""

from __future__ import annotations
import enum
import re
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """The user whose traces are being removed from the logs."""
    username: str
    tenant_domain: str
    tenant_id: int
    userstore_domain: str
    pseudonym: str         # literal text written in place of the PII


@dataclass(frozen=True, slots=True)
class Rule:
    """A templated detect/replace pair, as read from configuration."""
    key: str
    detect_pattern: str
    replace_pattern: str = ""   # empty = flag the line, don't rewrite it


@dataclass(frozen=True, slots=True)
class CompiledRule:
    """A rule whose detection pattern has been expanded and compiled."""
    key: str
    pattern: re.Pattern
    replace_pattern: str   # still a template, expanded per match


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """One rule hit on one line."""
    source: str
    line_number: int       # 1-based
    substituted: bool
    description: str = ""

    def format(self) -> str:
        status = "Replaced" if self.substituted else "Not Replaced"
        text = f"{status}, {self.line_number}, {str(self.substituted).lower()}"
        if self.description:
            text += f", {self.description}"
        return text


@dataclass(slots=True)
class LineOutcome:
    """Result of running every rule over one line."""
    text: str
    matched: bool = False
    entries: list[AuditEntry] = field(default_factory=list)


class FileState(enum.Enum):
    NOT_STARTED = "not_started"
    READING = "reading"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True)
class ProcessedFile:
    """Bookkeeping for one source file and the temp copy written beside it."""
    source: Path
    temp_path: Path | None = None
    state: FileState = FileState.NOT_STARTED
    lines: int = 0
    matched_lines: int = 0
    substitutions: int = 0
