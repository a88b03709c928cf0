"""Tests for rule loading from YAML and the command-line entry point."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import json

import pytest

from pii_log_redactor import ConfigError, Rule
from pii_log_redactor.config import load_rules, load_rules_from_yaml
from pii_log_redactor.cli import main


PATTERNS_YAML = """\
log_redactor:
  patterns:
    - key: plain-user
      detect: "${username}"
      replace: "${username}"
    - key: tenant-flag
      detect: "tenant=${tenant-id}"
"""

IDENTITY_ARGS = [
    "--username", "jdoe",
    "--tenant-domain", "carbon.super",
    "--tenant-id", "0",
    "--userstore-domain", "PRIMARY",
    "--pseudonym", "ANON-7f3a",
]


@pytest.fixture
def patterns_file(tmp_path):
    path = tmp_path / "patterns.yaml"
    path.write_text(PATTERNS_YAML, encoding="utf-8")
    return path


# ── Config ───────────────────────────────────────────────────────────

def test_load_rules_nested():
    rules = load_rules({"log_redactor": {"patterns": [
        {"key": "a", "detect": "${username}", "replace": "${username}"},
        {"key": "b", "detect": "x"},
    ]}})
    assert rules == [Rule("a", "${username}", "${username}"), Rule("b", "x", "")]


def test_load_rules_flat_with_aliases():
    rules = load_rules({"patterns": [
        {"key": "a", "detect_pattern": "jdoe", "replace_pattern": None},
    ]})
    assert rules == [Rule("a", "jdoe", "")]


@pytest.mark.parametrize("data", [
    [],
    {"patterns": "jdoe"},
    {"patterns": ["jdoe"]},
    {"patterns": [{"detect": "jdoe"}]},
    {"patterns": [{"key": "a", "detect": "  "}]},
    {"patterns": [{"key": "a", "detect": "jdoe", "replace": 3}]},
    {"log_redactor": [{"key": "a", "detect": "x"}]},
    {"log_redactor": "patterns"},
])
def test_load_rules_rejects_bad_config(data):
    with pytest.raises(ConfigError):
        load_rules(data)


def test_load_rules_from_yaml(patterns_file):
    rules = load_rules_from_yaml(patterns_file)
    assert [r.key for r in rules] == ["plain-user", "tenant-flag"]
    assert rules[1].replace_pattern == ""


def test_load_rules_from_yaml_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_rules_from_yaml(tmp_path / "nope.yaml")
    broken = tmp_path / "broken.yaml"
    broken.write_text("patterns: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_rules_from_yaml(broken)


def test_load_rules_from_yaml_not_utf8(tmp_path):
    path = tmp_path / "latin1.yaml"
    path.write_bytes(b"patterns:\n  - key: \xff\xfe\n    detect: jdoe\n")
    with pytest.raises(ConfigError):
        load_rules_from_yaml(path)


# ── CLI ──────────────────────────────────────────────────────────────

def test_cli_redact_replaces_originals(tmp_path, patterns_file, capsys):
    log_file = tmp_path / "app.log"
    log_file.write_text("User jdoe logged in\nclean\n", encoding="utf-8")

    code = main(["redact", *IDENTITY_ARGS, "--patterns", str(patterns_file), str(log_file)])

    assert code == 0
    assert log_file.read_text(encoding="utf-8") == "User ANON-7f3a logged in\nclean\n"
    assert not any(p.name.startswith("anon-") for p in tmp_path.iterdir())
    out = capsys.readouterr().out
    assert "Replaced, 1, true, rule 'plain-user'" in out
    assert f"=== {log_file.absolute()}" in out


def test_cli_keep_temp(tmp_path, patterns_file):
    log_file = tmp_path / "app.log"
    log_file.write_text("jdoe\n", encoding="utf-8")

    code = main(["redact", *IDENTITY_ARGS, "--patterns", str(patterns_file), "--keep-temp", str(log_file)])

    assert code == 0
    assert log_file.read_text(encoding="utf-8") == "jdoe\n"
    temps = [p for p in tmp_path.iterdir() if p.name.startswith("anon-")]
    assert len(temps) == 1
    assert temps[0].read_text(encoding="utf-8") == "ANON-7f3a\n"


def test_cli_report_file(tmp_path, patterns_file):
    log_file = tmp_path / "app.log"
    log_file.write_text("tenant=0 jdoe\n", encoding="utf-8")
    report = tmp_path / "forget-me.report"

    code = main([
        "redact", *IDENTITY_ARGS, "--patterns", str(patterns_file),
        "--report", str(report), str(log_file),
    ])

    assert code == 0
    lines = report.read_text(encoding="utf-8").splitlines()
    assert lines[1:3] == [
        "Replaced, 1, true, rule 'plain-user'",
        "Not Replaced, 1, false, rule 'tenant-flag' (detect only)",
    ]


def test_cli_discards_partial_temp_on_failure(tmp_path, patterns_file, capsys):
    log_file = tmp_path / "binary.log"
    log_file.write_bytes(b"\xff\xfe jdoe\n")

    code = main(["redact", *IDENTITY_ARGS, "--patterns", str(patterns_file), str(log_file)])

    assert code == 1
    assert "error:" in capsys.readouterr().err
    assert not any(p.name.startswith("anon-") for p in tmp_path.iterdir())
    assert log_file.read_bytes() == b"\xff\xfe jdoe\n"


def test_cli_bad_pattern_touches_nothing(tmp_path, capsys):
    patterns = tmp_path / "patterns.yaml"
    patterns.write_text('patterns:\n  - key: bad\n    detect: "(${username}"\n', encoding="utf-8")
    log_file = tmp_path / "app.log"
    log_file.write_text("jdoe\n", encoding="utf-8")

    code = main(["redact", *IDENTITY_ARGS, "--patterns", str(patterns), str(log_file)])

    assert code == 1
    assert "bad" in capsys.readouterr().err
    assert sorted(p.name for p in tmp_path.iterdir()) == ["app.log", "patterns.yaml"]


def test_cli_check(patterns_file, capsys):
    code = main(["check", *IDENTITY_ARGS, "--patterns", str(patterns_file)])

    assert code == 0
    output = json.loads(capsys.readouterr().out)
    assert output == [
        {"key": "plain-user", "detect": "jdoe", "replace": "${username}", "placeholders": ["username"]},
        {"key": "tenant-flag", "detect": "tenant=0", "replace": "", "placeholders": ["tenant-id"]},
    ]


def test_cli_bad_pattern_creates_no_report(tmp_path):
    patterns = tmp_path / "patterns.yaml"
    patterns.write_text('patterns:\n  - key: bad\n    detect: "user=${username"\n', encoding="utf-8")
    log_file = tmp_path / "app.log"
    log_file.write_text("user=jdoe\n", encoding="utf-8")
    report = tmp_path / "forget-me.report"

    code = main([
        "redact", *IDENTITY_ARGS, "--patterns", str(patterns),
        "--report", str(report), str(log_file),
    ])

    assert code == 1
    assert not report.exists()
    assert log_file.read_text(encoding="utf-8") == "user=jdoe\n"


def test_cli_failure_lists_finished_temp_copies(tmp_path, patterns_file, capsys):
    good = tmp_path / "good.log"
    good.write_text("User jdoe logged in\n", encoding="utf-8")
    bad = tmp_path / "binary.log"
    bad.write_bytes(b"\xff\xfe jdoe\n")

    code = main(["redact", *IDENTITY_ARGS, "--patterns", str(patterns_file), str(good), str(bad)])

    assert code == 1
    temps = [p for p in tmp_path.iterdir() if p.name.startswith("anon-")]
    assert len(temps) == 1
    assert temps[0].name.endswith("-good.log")
    captured = capsys.readouterr()
    assert f"{good} -> {temps[0]}" in captured.err
    assert "Replaced, 1, true, rule 'plain-user'" in captured.out
    # Nothing was finalized
    assert good.read_text(encoding="utf-8") == "User jdoe logged in\n"
