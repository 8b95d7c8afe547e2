from __future__ import annotations

from collections.abc import Callable
from urllib.parse import urlsplit

from magecheck.probes.sites import COOKIE_DOMAIN, SECURE_BASE_URL, UNSECURE_BASE_URL
from magecheck.utils.check_types import CheckContext, Finding, Site

SitePredicate = Callable[[str, Site], bool]

_BASE_URLS = (
    ("unsecure", "Unsecure BaseURL", UNSECURE_BASE_URL, "http"),
    ("secure", "Secure BaseURL", SECURE_BASE_URL, "https"),
)


def url_host(value: str) -> str | None:
    try:
        return urlsplit(str(value or "")).hostname
    except ValueError:
        return None


def check_setting(
    context: CheckContext,
    label: str,
    config_key: str,
    error_message: str,
    predicate: SitePredicate,
) -> list[Finding]:
    """
    Evaluate `predicate(value, site)` for the value of `config_key` on every site.

    Each failing site yields its own ERROR (scoped to the site code). When no
    site fails, a single OK for `label` is emitted; there is never an OK per site.
    """
    findings: list[Finding] = []
    for site in context.list_sites():
        value = context.config_reader.read(config_key, site)
        if not predicate(value, site):
            findings.append(Finding.error(label, error_message, scope=site.code))
    if not findings:
        findings.append(Finding.ok(label, "OK"))
    return findings


def _host_is_not_localhost(value: str, site: Site) -> bool:
    return url_host(value) != "localhost"


def check_base_urls(context: CheckContext) -> list[Finding]:
    message = "localhost should not be used as hostname. Hostname must contain a dot"
    findings: list[Finding] = []
    for _, label, key, _ in _BASE_URLS:
        findings.extend(check_setting(context, label, key, message, _host_is_not_localhost))
    return findings


def cookie_domain_matches(context: CheckContext) -> SitePredicate:
    def _predicate(value: str, site: Site) -> bool:
        cookie_domain = site.cookie_domain or context.config_reader.read(COOKIE_DOMAIN, site)
        if not cookie_domain:
            return True
        host = url_host(value)
        return host is not None and cookie_domain.lower() in host

    return _predicate


def check_cookie_domain(context: CheckContext) -> list[Finding]:
    predicate = cookie_domain_matches(context)
    findings: list[Finding] = []
    for kind, _, key, scheme in _BASE_URLS:
        label = f"Cookie Domain ({kind})"
        message = f"Cookie Domain and {kind.capitalize()} BaseURL ({scheme}) does not match"
        findings.extend(check_setting(context, label, key, message, predicate))
    return findings
