"""Swap finished temp files over their originals, or throw them away."""

from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Iterable

from .errors import ReplaceError
from .types import FileState, ProcessedFile

log = logging.getLogger(__name__)


def replace_original(
    processed: ProcessedFile,
    *,
    logger: logging.Logger | None = None,
) -> Path:
    """Move the temp copy over the source file and return the source path."""
    logger = logger or log
    if processed.state is not FileState.COMPLETED or processed.temp_path is None:
        raise ReplaceError(
            f"Refusing to replace {processed.source}: file is {processed.state.value}"
        )
    try:
        os.replace(processed.temp_path, processed.source)
    except OSError as exc:
        raise ReplaceError(
            f"Error occurred while replacing {processed.source} "
            f"with {processed.temp_path}: {exc}"
        ) from exc
    logger.info("Replaced %s with redacted copy %s", processed.source, processed.temp_path.name)
    return processed.source


def finalize_all(
    processed: Iterable[ProcessedFile],
    *,
    logger: logging.Logger | None = None,
) -> list[Path]:
    return [replace_original(p, logger=logger) for p in processed]


def discard_temp(path: str | os.PathLike | None, *, logger: logging.Logger | None = None) -> bool:
    """Delete an abandoned temp file. Returns True if something was removed."""
    logger = logger or log
    if path is None:
        return False
    try:
        Path(path).unlink()
    except FileNotFoundError:
        return False
    logger.info("Discarded temp file %s", path)
    return True
