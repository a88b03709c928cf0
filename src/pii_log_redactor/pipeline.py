"""File pipeline — stream each log file through the line rewriter.

Every source file is copied line by line into a new temp file beside it;
the source itself is never written.  Swapping the temp file in is left to
finalize.replace_original, which takes the path recorded here.

Usage:
    report = ListReport()
    done = process_files(user, report, rules, ["/var/log/app/audit.log"])
    for processed in done:
        replace_original(processed)
"""

from __future__ import annotations
import itertools
import logging
import os
import time
from pathlib import Path
from typing import Iterable, Sequence

from .errors import FileProcessingError
from .patterns import compile_rules
from .redactor import rewrite_line
from .report import ReportSink
from .templates import resolve_placeholders
from .types import CompiledRule, FileState, ProcessedFile, Rule, UserIdentity

log = logging.getLogger(__name__)

ENCODING = "utf-8"
TEMP_FILE_PREFIX = "anon-"

_sequence = itertools.count(1)


def temp_path_for(path: Path, token: str) -> Path:
    """Name of the temp copy of `path` for the given disambiguator."""
    return path.parent / f"{TEMP_FILE_PREFIX}{token}-{path.name}"


def _next_token() -> str:
    return f"{time.time_ns()}-{next(_sequence)}"


def process_files(
    identity: UserIdentity,
    report: ReportSink,
    rules: Sequence[Rule],
    files: Iterable[str | os.PathLike],
    *,
    logger: logging.Logger | None = None,
) -> list[ProcessedFile]:
    """Redact every file in order, writing a temp copy of each.

    Rules are resolved and compiled before any file is opened, so a bad
    identity or rule fails the whole run without touching the disk.  The
    first file that can't be read or written stops the run with
    FileProcessingError; files finished before it keep their temp copies.
    """
    logger = logger or log
    mapping = resolve_placeholders(identity)
    compiled = compile_rules(rules, mapping, logger=logger)

    done: list[ProcessedFile] = []
    for path in files:
        try:
            done.append(process_file(
                Path(path), identity, report, compiled, mapping, logger=logger,
            ))
        except FileProcessingError as exc:
            exc.completed = list(done)
            raise
    return done


def process_file(
    path: Path,
    identity: UserIdentity,
    report: ReportSink,
    compiled: Sequence[CompiledRule],
    mapping: dict[str, str],
    *,
    logger: logging.Logger | None = None,
) -> ProcessedFile:
    """Redact one file with already compiled rules."""
    logger = logger or log
    label = str(path.absolute())
    processed = ProcessedFile(source=path)

    report.append_section_start(label)
    logger.debug("Reading log file %s.", path.name)
    processed.state = FileState.READING
    try:
        with open(path, "r", encoding=ENCODING) as reader:
            processed.temp_path = temp_path_for(path, _next_token())
            with open(processed.temp_path, "x", encoding=ENCODING, newline="\n") as writer:
                for line_number, raw in enumerate(reader, start=1):
                    outcome = rewrite_line(
                        raw.rstrip("\n"),
                        compiled,
                        mapping,
                        line_number,
                        identity.pseudonym,
                        source=label,
                        logger=logger,
                    )
                    writer.write(outcome.text + "\n")
                    processed.lines = line_number
                    if outcome.matched:
                        processed.matched_lines += 1
                    for entry in outcome.entries:
                        processed.substitutions += entry.substituted
                        report.append(entry.format())
    except (OSError, UnicodeError) as exc:
        processed.state = FileState.FAILED
        logger.error("Error occurred while file read/write operation on %s: %s", path, exc)
        raise FileProcessingError(path, processed.temp_path, exc) from exc

    processed.state = FileState.COMPLETED
    logger.info(
        "Completed scanning log file: %s (%d lines, %d matched, %d replaced)",
        path, processed.lines, processed.matched_lines, processed.substitutions,
    )
    report.append_section_end(label)
    return processed
