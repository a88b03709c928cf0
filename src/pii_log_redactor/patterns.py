"""Rule compilation — templated rules in, compiled matchers out.

Each rule's detection template is expanded against the user's placeholder
mapping and compiled once; the replacement template stays a template and is
expanded again for every match (see redactor.rewrite_line).
"""

from __future__ import annotations
import logging
import re
from typing import Iterable, Mapping

from .errors import InvalidPattern
from .templates import expand
from .types import CompiledRule, Rule

log = logging.getLogger(__name__)


def compile_rule(
    rule: Rule,
    mapping: Mapping[str, str],
    *,
    logger: logging.Logger | None = None,
) -> CompiledRule:
    """Expand and compile one rule."""
    logger = logger or log
    logger.debug("Compiling pattern %s.", rule.key)

    detect = expand(rule.detect_pattern, mapping, source=rule.key).strip()
    if not detect:
        raise InvalidPattern(rule.key, detect, "detection pattern is empty")
    try:
        pattern = re.compile(detect)
    except re.error as exc:
        raise InvalidPattern(rule.key, detect, str(exc)) from exc

    # The replacement is expanded again at match time; doing it once here
    # surfaces bad templates before any file is opened.
    replace = expand(rule.replace_pattern, mapping, source=rule.key)
    if replace.strip():
        try:
            re.compile(replace)
        except re.error as exc:
            raise InvalidPattern(rule.key, replace, str(exc)) from exc

    return CompiledRule(key=rule.key, pattern=pattern, replace_pattern=rule.replace_pattern)


def compile_rules(
    rules: Iterable[Rule],
    mapping: Mapping[str, str],
    *,
    logger: logging.Logger | None = None,
) -> list[CompiledRule]:
    """Compile rules in registration order. The first bad rule aborts."""
    return [compile_rule(rule, mapping, logger=logger) for rule in rules]
