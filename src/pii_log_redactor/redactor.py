"""Line rewriting — the main engine.

Usage:
    from pii_log_redactor import Rule, UserIdentity
    from pii_log_redactor.patterns import compile_rules
    from pii_log_redactor.redactor import rewrite_line
    from pii_log_redactor.templates import resolve_placeholders

    user = UserIdentity("jdoe", "carbon.super", 0, "PRIMARY", "ANON-7f3a")
    mapping = resolve_placeholders(user)
    rules = compile_rules([Rule("user", "jdoe", "jdoe")], mapping)

    outcome = rewrite_line("User jdoe logged in", rules, mapping, 1, user.pseudonym)
    print(outcome.text)          # "User ANON-7f3a logged in"

Rules are applied as an ordered fold: each one sees the line as left by the
ones before it, so the order they were registered in changes the output.
"""

from __future__ import annotations
import logging
import re
from typing import Mapping, Sequence

from .templates import expand
from .types import AuditEntry, CompiledRule, LineOutcome

log = logging.getLogger(__name__)


def rewrite_line(
    line: str,
    rules: Sequence[CompiledRule],
    mapping: Mapping[str, str],
    line_number: int,
    pseudonym: str,
    *,
    source: str = "",
    logger: logging.Logger | None = None,
) -> LineOutcome:
    """Run every compiled rule over one line (without its line terminator).

    On a detection hit the rule's replacement template is expanded; if the
    result is non-blank it is used as a regex and every match of it in the
    line is replaced by the pseudonym, taken literally.  A blank
    replacement only flags the line.
    """
    logger = logger or log
    outcome = LineOutcome(text=line)

    for rule in rules:
        if not rule.pattern.search(outcome.text):
            continue

        outcome.matched = True
        replace = expand(rule.replace_pattern, mapping, source=rule.key)

        if replace.strip():
            outcome.text = re.sub(replace, lambda _m: pseudonym, outcome.text)
            outcome.entries.append(AuditEntry(
                source=source,
                line_number=line_number,
                substituted=True,
                description=f"rule '{rule.key}'",
            ))
            logger.debug("Replaced %s:%d (rule %s)", source, line_number, rule.key)
        else:
            outcome.entries.append(AuditEntry(
                source=source,
                line_number=line_number,
                substituted=False,
                description=f"rule '{rule.key}' (detect only)",
            ))
            logger.debug("Not replaced %s:%d (rule %s)", source, line_number, rule.key)

    return outcome
