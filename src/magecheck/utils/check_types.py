from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Literal, Protocol

Severity = Literal["OK", "WARNING", "ERROR"]

SEVERITIES: tuple[Severity, ...] = ("OK", "WARNING", "ERROR")
_RANK = {s: i for i, s in enumerate(SEVERITIES)}


def severity_rank(severity: str) -> int:
    return _RANK.get(severity, _RANK["ERROR"])


def worst_severity(findings: Iterable[Finding]) -> Severity:
    worst: Severity = "OK"
    for f in findings:
        if severity_rank(f.severity) > severity_rank(worst):
            worst = f.severity
    return worst


class DatabaseUnavailable(RuntimeError):
    pass


class ExtensionRegistryUnavailable(RuntimeError):
    pass


class SiteEnumerationError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class Finding:
    severity: Severity
    subject: str
    detail: str
    scope: str | None = None
    remediation: tuple[str, ...] = ()
    group: str = ""
    check: str = ""

    @classmethod
    def ok(cls, subject: str, detail: str, **kw: Any) -> Finding:
        return cls("OK", subject, detail, **kw)

    @classmethod
    def warning(cls, subject: str, detail: str, **kw: Any) -> Finding:
        return cls("WARNING", subject, detail, **kw)

    @classmethod
    def error(cls, subject: str, detail: str, **kw: Any) -> Finding:
        return cls("ERROR", subject, detail, **kw)


@dataclass(frozen=True, slots=True)
class Site:
    code: str
    unsecure_base_url: str
    secure_base_url: str
    cookie_domain: str | None = None


class FilesystemProbe(Protocol):
    def exists(self, path: Path) -> bool: ...
    def is_writable(self, path: Path) -> bool: ...


class ExtensionRegistry(Protocol):
    def is_loaded(self, name: str) -> bool: ...


class SiteEnumerator(Protocol):
    def list_sites(self) -> Iterable[Site]: ...


class ConfigReader(Protocol):
    def read(self, key: str, site: Site) -> str: ...


class HttpProber(Protocol):
    """
    Returns the HTTP status code, or None when the request failed
    (connection refused, DNS failure, timeout).
    """

    def probe(self, url: str, timeout: float) -> int | None: ...


class DatabaseProber(Protocol):
    def version(self) -> str: ...
    def list_engines(self) -> set[str]: ...


@dataclass(frozen=True, slots=True)
class CheckContext:
    """
    Read-only facts and collaborators handed to every check.

    Built once per invocation. Mappings are wrapped in read-only proxies.
    """

    root_path: Path
    required_folders: Mapping[str, str]
    required_files: Mapping[str, str]
    required_extensions: tuple[str, ...]
    bytecode_cache_candidates: tuple[str, ...]
    filesystem: FilesystemProbe
    extensions: ExtensionRegistry
    sites: SiteEnumerator
    config_reader: ConfigReader
    security_probe: HttpProber
    db_probe: DatabaseProber
    security_probe_path: str = "app/etc/local.xml"
    security_timeout: float = 30.0
    min_db_version: str = "4.1.20"
    required_db_engine: str = "InnoDB"

    def __post_init__(self) -> None:
        for name in ("required_folders", "required_files"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))
        for name in ("required_extensions", "bytecode_cache_candidates"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    def list_sites(self) -> list[Site]:
        return list(self.sites.list_sites())


CheckFn = Callable[[CheckContext], Iterable[Finding]]


@dataclass(frozen=True, slots=True)
class Check:
    name: str
    evaluate: CheckFn


@dataclass(frozen=True, slots=True)
class CheckGroup:
    name: str
    checks: tuple[Check, ...] = ()
    title: str = ""

    @property
    def label(self) -> str:
        return self.title or self.name


@dataclass(frozen=True, slots=True)
class RunReport:
    metadata: dict[str, Any]
    groups: tuple[str, ...] = ()
    findings: tuple[Finding, ...] = ()
    group_titles: dict[str, str] = field(default_factory=dict)

    def counts(self) -> dict[str, int]:
        counts = {s: 0 for s in SEVERITIES}
        for f in self.findings:
            if f.severity in counts:
                counts[f.severity] += 1
        return counts

    @property
    def overall_ok(self) -> bool:
        return self.counts()["ERROR"] == 0

    def worst(self) -> Severity:
        return worst_severity(self.findings)

    def for_group(self, name: str) -> list[Finding]:
        return [f for f in self.findings if f.group == name]
