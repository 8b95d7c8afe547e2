from __future__ import annotations

from typing import Any

from magecheck.utils.check_redaction import redact, redact_obj
from magecheck.utils.check_types import Finding, RunReport

MARKERS = {"OK": "[OK]", "WARNING": "[WARN]", "ERROR": "[ERROR]"}


def _finding_line(f: Finding) -> str:
    marker = MARKERS.get(f.severity, "[ERROR]")
    scope = f"Store: {f.scope} " if f.scope else ""
    return redact(f"{marker} {scope}{f.subject}: {f.detail}")


def _section(title: str, findings: list[Finding]) -> list[str]:
    heading = f"Check: {title}"
    lines = [heading, "-" * len(heading)]
    if not findings:
        lines.append("- None")
        return lines
    for f in findings:
        lines.append(_finding_line(f))
        if f.severity != "OK":
            for hint in f.remediation:
                h = redact(str(hint))
                if h.strip():
                    lines.append(f"    Hint: {h}")
    return lines


def format_summary(report: RunReport) -> str:
    counts = report.counts()
    status = "PASSED" if report.overall_ok else "FAILED"
    return f"{status}: OK={counts['OK']} WARNING={counts['WARNING']} ERROR={counts['ERROR']}"


def format_findings_text(report: RunReport) -> str:
    """Group sections only; deterministic for an unchanged installation."""
    lines: list[str] = []
    for name in report.groups:
        lines.extend(_section(report.group_titles.get(name, name), report.for_group(name)))
        lines.append("")
    lines.append(format_summary(report))
    return "\n".join(lines) + "\n"


def format_report_text(report: RunReport) -> str:
    meta = redact_obj(report.metadata or {})
    lines: list[str] = []
    lines.append("System Check Report")
    lines.append("=" * len(lines[-1]))
    lines.append(f"Timestamp: {meta.get('timestamp') or 'unknown'}")
    lines.append(f"Version: {meta.get('app_version') or 'unknown'}")
    lines.append(f"Root: {meta.get('root_path') or 'unknown'}")
    lines.append("")
    return "\n".join(lines) + "\n" + format_findings_text(report)


def format_report_json(report: RunReport) -> dict[str, Any]:
    groups: list[dict[str, Any]] = []
    for name in report.groups:
        groups.append(
            {
                "name": name,
                "title": report.group_titles.get(name, name),
                "findings": [
                    {
                        "severity": f.severity,
                        "check": f.check,
                        "subject": redact(f.subject),
                        "detail": redact(f.detail),
                        "scope": f.scope,
                        "remediation": [redact(r) for r in f.remediation],
                    }
                    for f in report.for_group(name)
                ],
            }
        )
    return {
        "metadata": redact_obj(report.metadata or {}),
        "summary": report.counts(),
        "overall_ok": report.overall_ok,
        "worst": report.worst(),
        "groups": groups,
    }
