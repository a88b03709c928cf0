"""PII Log Redactor — remove a user's identifying data from plain-text logs."""

from .types import (
    UserIdentity, Rule, CompiledRule, AuditEntry, LineOutcome,
    FileState, ProcessedFile,
)
from .errors import (
    RedactionError, InvalidIdentity, UnresolvedPlaceholder, InvalidPattern,
    FileProcessingError, ConfigError, ReplaceError,
)
from .templates import resolve_placeholders, expand
from .patterns import compile_rules
from .redactor import rewrite_line
from .pipeline import process_files
from .report import ReportSink, ListReport, TextReport
from .finalize import replace_original, finalize_all, discard_temp
from .config import load_rules, load_rules_from_yaml

__all__ = [
    "UserIdentity", "Rule", "CompiledRule", "AuditEntry", "LineOutcome",
    "FileState", "ProcessedFile",
    "RedactionError", "InvalidIdentity", "UnresolvedPlaceholder", "InvalidPattern",
    "FileProcessingError", "ConfigError", "ReplaceError",
    "resolve_placeholders", "expand",
    "compile_rules",
    "rewrite_line",
    "process_files",
    "ReportSink", "ListReport", "TextReport",
    "replace_original", "finalize_all", "discard_temp",
    "load_rules", "load_rules_from_yaml",
]
__version__ = "0.1.0"
