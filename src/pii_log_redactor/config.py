"""YAML/dict rule loader for pii-log-redactor.

Supports loading from a YAML file or a plain dict (for embedding in a
larger config, nested under a ``log_redactor`` key).

Example YAML:

    log_redactor:
      patterns:
        - key: plain-username
          detect: "${username}"
          replace: "${username}"
        - key: qualified-username
          detect: "${userstore-domain}/${username}@${tenant-domain}"
          replace: "${username}"
        - key: tenant-audit
          detect: "tenant=${tenant-id} .*login"
          replace: ""              # flag only

Order matters: rules are applied to each line in the order listed.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .types import Rule


DEFAULT_PATTERNS = os.environ.get("LOG_REDACTOR_PATTERNS", "patterns.yaml")
DEFAULT_REPORT = os.environ.get("LOG_REDACTOR_REPORT", "")


def _field(entry: dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in entry:
            return entry[name]
    return None


def load_rules(data: dict[str, Any]) -> list[Rule]:
    """Build the ordered rule list from a config dict (from YAML or inline)."""
    if not isinstance(data, dict):
        raise ConfigError("Rule configuration must be a mapping")
    # Support nested under "log_redactor" key or flat
    if "log_redactor" in data:
        data = data["log_redactor"] or {}
        if not isinstance(data, dict):
            raise ConfigError("'log_redactor' must be a mapping")

    patterns = data.get("patterns")
    if not isinstance(patterns, list):
        raise ConfigError("'patterns' must be a list of rule definitions")

    rules: list[Rule] = []
    for index, entry in enumerate(patterns, start=1):
        if not isinstance(entry, dict):
            raise ConfigError(f"Pattern #{index} must be a mapping")
        key = entry.get("key")
        detect = _field(entry, "detect", "detect_pattern")
        replace = _field(entry, "replace", "replace_pattern")
        if not isinstance(key, str) or not key:
            raise ConfigError(f"Pattern #{index} has no key")
        if not isinstance(detect, str) or not detect.strip():
            raise ConfigError(f"Pattern '{key}' has no detect pattern")
        if replace is None:
            replace = ""
        if not isinstance(replace, str):
            raise ConfigError(f"Pattern '{key}' has a non-string replace pattern")
        rules.append(Rule(key=key, detect_pattern=detect, replace_pattern=replace))
    return rules


def load_rules_from_yaml(path: str | Path) -> list[Rule]:
    """Load the rule list from a YAML file."""
    path = Path(path).expanduser()
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read pattern file {path}: {exc}") from exc
    except UnicodeError as exc:
        raise ConfigError(f"Pattern file {path} is not valid UTF-8: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Pattern file {path} is not valid YAML: {exc}") from exc
    return load_rules(data or {})
