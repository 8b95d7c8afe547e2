from __future__ import annotations

from magecheck.utils.check_types import CheckContext, Finding


def check_local_xml_exposure(context: CheckContext) -> list[Finding]:
    """
    Probe `<unsecure base url><security_probe_path>` once per distinct base URL.

    Only HTTP 200 counts as exposed. Other statuses, timeouts and connection
    failures all mean the file is not publicly fetchable.
    """
    path = context.security_probe_path
    seen: dict[str, str] = {}
    for site in context.list_sites():
        base = site.unsecure_base_url
        if base not in seen:
            seen[base] = site.code
    if not seen:
        return [Finding.warning(path, "no sites configured; exposure not probed")]

    findings: list[Finding] = []
    for base, code in seen.items():
        url = f"{base}{path}"
        status = context.security_probe.probe(url, context.security_timeout)
        if status == 200:
            findings.append(
                Finding.error(
                    path,
                    f"can be accessed from outside! ({url})",
                    scope=code,
                    remediation=(f"Deny web access to {path} in the web server configuration.",),
                )
            )
        else:
            reason = "no response" if status is None else f"HTTP {status}"
            findings.append(
                Finding.ok(path, f"cannot be accessed from outside ({reason}).", scope=code)
            )
    return findings
