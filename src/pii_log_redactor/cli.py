"""CLI interface for pii-log-redactor — one invocation per forget-me request.

Usage:
    # Redact a user's traces from log files, replacing the originals
    python -m pii_log_redactor.cli redact \
        --username jdoe --tenant-domain carbon.super --tenant-id 0 \
        --userstore-domain PRIMARY --pseudonym ANON-7f3a \
        --patterns patterns.yaml --report forget-me.report \
        /var/log/app/audit.log /var/log/app/http_access.log

    # Leave the redacted copies (anon-*) beside the originals instead
    python -m pii_log_redactor.cli redact --keep-temp ...

    # Compile the rules for a user and print the expanded patterns
    python -m pii_log_redactor.cli check --patterns patterns.yaml \
        --username jdoe --tenant-domain carbon.super --tenant-id 0 \
        --userstore-domain PRIMARY --pseudonym ANON-7f3a
"""

from __future__ import annotations
import argparse
import json
import logging
import sys

from .config import DEFAULT_PATTERNS, DEFAULT_REPORT, load_rules_from_yaml
from .errors import FileProcessingError, RedactionError
from .finalize import discard_temp, finalize_all
from .patterns import compile_rules
from .pipeline import process_files
from .report import ListReport, TextReport
from .templates import placeholders_in, resolve_placeholders
from .types import ProcessedFile, UserIdentity

log = logging.getLogger("pii_log_redactor")


def _identity(args: argparse.Namespace) -> UserIdentity:
    return UserIdentity(
        username=args.username,
        tenant_domain=args.tenant_domain,
        tenant_id=args.tenant_id,
        userstore_domain=args.userstore_domain,
        pseudonym=args.pseudonym,
    )


def cmd_redact(args: argparse.Namespace) -> int:
    """Redact the given files and (unless --keep-temp) replace them."""
    identity = _identity(args)
    rules = load_rules_from_yaml(args.patterns)
    # Bad rules must fail before the report file is created.
    compile_rules(rules, resolve_placeholders(identity), logger=log)

    report = TextReport(args.report) if args.report else ListReport()
    try:
        processed = process_files(identity, report, rules, args.files, logger=log)
    except FileProcessingError as exc:
        discard_temp(exc.temp_path, logger=log)
        _print_report(report)
        _list_temp_files(exc.completed)
        raise
    finally:
        if isinstance(report, TextReport):
            report.close()

    _print_report(report)
    if not args.keep_temp:
        finalize_all(processed, logger=log)
    else:
        _list_temp_files(processed)
    return 0


def _print_report(report: ListReport | TextReport) -> None:
    if isinstance(report, ListReport):
        for line in report.lines:
            sys.stdout.write(line + "\n")


def _list_temp_files(processed: list[ProcessedFile]) -> None:
    for p in processed:
        sys.stderr.write(f"{p.source} -> {p.temp_path}\n")


def cmd_check(args: argparse.Namespace) -> int:
    """Compile the rules for a user and dump the expanded patterns."""
    mapping = resolve_placeholders(_identity(args))
    rules = load_rules_from_yaml(args.patterns)
    compiled = compile_rules(rules, mapping, logger=log)

    output = [
        {
            "key": rule.key,
            "detect": c.pattern.pattern,
            "replace": rule.replace_pattern,
            "placeholders": sorted(
                set(placeholders_in(rule.detect_pattern)) | set(placeholders_in(rule.replace_pattern))
            ),
        }
        for rule, c in zip(rules, compiled)
    ]
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


def _add_identity_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--username", required=True, help="User to forget")
    parser.add_argument("--tenant-domain", required=True, help="Tenant domain of the user")
    parser.add_argument("--tenant-id", type=int, required=True, help="Tenant id of the user")
    parser.add_argument("--userstore-domain", default="PRIMARY", help="User store domain")
    parser.add_argument("--pseudonym", required=True, help="Text written in place of the user")
    parser.add_argument("--patterns", default=DEFAULT_PATTERNS, help="YAML rule file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pii_log_redactor",
        description="Remove a user's identifying data from log files",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    redact = sub.add_parser("redact", help="Redact log files for one user")
    _add_identity_args(redact)
    redact.add_argument("--report", default=DEFAULT_REPORT, help="Report file (default: stdout)")
    redact.add_argument("--keep-temp", action="store_true",
                        help="Keep the redacted copies beside the originals")
    redact.add_argument("files", nargs="+", help="Log files to process")

    check = sub.add_parser("check", help="Compile rules and print them")
    _add_identity_args(check)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "redact": cmd_redact,
        "check": cmd_check,
    }
    try:
        return cmds[args.command](args)
    except RedactionError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
