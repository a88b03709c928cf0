"""Placeholder resolution for rule templates.

A template is a plain string with ``${name}`` tokens in it:

    ${userstore-domain}/${username}@${tenant-domain}

``resolve_placeholders`` turns a UserIdentity into the values for those
names, and ``expand`` substitutes them.  ``$${name}`` escapes a token; it
expands to a regex matching the literal text ``${name}``.
"""

from __future__ import annotations
import re
from typing import Mapping

from .errors import InvalidIdentity, UnresolvedPlaceholder
from .types import UserIdentity


USERNAME = "username"
TENANT_DOMAIN = "tenant-domain"
TENANT_ID = "tenant-id"
USERSTORE_DOMAIN = "userstore-domain"

PLACEHOLDERS = (USERNAME, TENANT_DOMAIN, TENANT_ID, USERSTORE_DOMAIN)

# The primary user store never shows up in usernames written to the logs.
PRIMARY_USERSTORE_DOMAIN = "PRIMARY"

# Group 1 is the escaping "$" (if any), group 2 the placeholder name and
# group 3 the closing brace, missing when the token is never terminated.
_TOKEN = re.compile(r"(\$)?\$\{([^}]*)(\})?")


def validate_identity(identity: UserIdentity) -> None:
    """Raise InvalidIdentity unless every field is usable."""
    for name in ("username", "tenant_domain", "userstore_domain", "pseudonym"):
        value = getattr(identity, name, None)
        if not isinstance(value, str) or not value:
            raise InvalidIdentity(f"{name} must be a non-empty string, got {value!r}")
    tenant_id = identity.tenant_id
    if isinstance(tenant_id, bool) or not isinstance(tenant_id, int):
        raise InvalidIdentity(f"tenant_id must be an integer, got {tenant_id!r}")
    if tenant_id < 0:
        raise InvalidIdentity(f"tenant_id must not be negative, got {tenant_id}")


def resolve_placeholders(identity: UserIdentity) -> dict[str, str]:
    """Build the placeholder mapping for one user."""
    validate_identity(identity)
    if identity.userstore_domain.upper() == PRIMARY_USERSTORE_DOMAIN:
        userstore = ""
    else:
        domain = identity.userstore_domain
        userstore = domain[:1].upper() + domain[1:]
    return {
        USERNAME: identity.username,
        TENANT_DOMAIN: identity.tenant_domain,
        TENANT_ID: str(identity.tenant_id),
        USERSTORE_DOMAIN: userstore,
    }


def placeholders_in(template: str) -> list[str]:
    """Names referenced by a template, in order, escapes excluded."""
    return [
        m.group(2) for m in _TOKEN.finditer(template)
        if not m.group(1) and m.group(3)
    ]


def expand(
    template: str,
    mapping: Mapping[str, str],
    *,
    source: str | None = None,
) -> str:
    """Substitute every ${name} in template.

    Raises UnresolvedPlaceholder for a name missing from mapping or a
    ``${`` that is never closed; `source` is only used to say which rule
    the template came from.  An escaped ``$${name}`` comes out
    regex-escaped, since every expanded template is compiled as a regex.
    """
    def _sub(m: re.Match) -> str:
        name = m.group(2)
        if not m.group(3):
            raise UnresolvedPlaceholder(name, source)
        if m.group(1):
            return re.escape("${" + name + "}")
        if name not in mapping:
            raise UnresolvedPlaceholder(name, source)
        return mapping[name]

    return _TOKEN.sub(_sub, template)
