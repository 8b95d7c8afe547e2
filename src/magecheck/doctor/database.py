from __future__ import annotations

import re

from magecheck.utils.check_types import CheckContext, Finding

_NUMERIC_PREFIX_RE = re.compile(r"\d+(?:\.\d+)*")


def version_tuple(raw: str) -> tuple[int, ...]:
    """
    Leading dotted numeric part of a server version.

    "5.7.33-0ubuntu0.18.04.1-log" -> (5, 7, 33); "10.4.12-MariaDB" -> (10, 4, 12).
    """
    m = _NUMERIC_PREFIX_RE.search(str(raw or ""))
    if not m:
        return ()
    return tuple(int(part) for part in m.group(0).split("."))


def version_compare(left: str, right: str) -> int:
    """Return -1, 0 or 1; missing components count as zero."""
    a, b = version_tuple(left), version_tuple(right)
    width = max(len(a), len(b))
    a += (0,) * (width - len(a))
    b += (0,) * (width - len(b))
    return (a > b) - (a < b)


def check_db_version(context: CheckContext) -> list[Finding]:
    raw = context.db_probe.version()
    subject = "MySQL Version"
    if version_compare(raw, context.min_db_version) >= 0:
        return [Finding.ok(subject, f"{raw} found.")]
    return [
        Finding.error(
            subject,
            f"{raw} found. Upgrade your MySQL Version.",
            remediation=(f"Minimum supported version is {context.min_db_version}.",),
        )
    ]


def check_db_engine(context: CheckContext) -> list[Finding]:
    wanted = context.required_db_engine.strip().lower()
    engines = {str(e).strip().lower() for e in context.db_probe.list_engines()}
    subject = "Required MySQL Storage Engine"
    if wanted in engines:
        return [Finding.ok(subject, f"{context.required_db_engine} found.")]
    return [
        Finding.error(
            subject,
            f'"{context.required_db_engine}" not found!',
            remediation=(f"Enable the {context.required_db_engine} storage engine on the server.",),
        )
    ]
