from __future__ import annotations

from magecheck.utils.check_types import CheckContext, Finding


def check_required_extensions(context: CheckContext) -> list[Finding]:
    findings: list[Finding] = []
    for ext in context.required_extensions:
        subject = f"Required PHP Module {ext}"
        if context.extensions.is_loaded(ext):
            findings.append(Finding.ok(subject, "found."))
        else:
            hint = f"Install or enable the PHP extension '{ext}'."
            findings.append(Finding.error(subject, "not found!", remediation=(hint,)))
    return findings


def check_bytecode_cache(context: CheckContext) -> list[Finding]:
    """First loaded candidate wins; a miss is reported once for all candidates."""
    candidates = list(context.bytecode_cache_candidates)
    for ext in candidates:
        if context.extensions.is_loaded(ext):
            return [Finding.ok(f"Bytecode Cache {ext}", "found.")]
    listed = ", ".join(candidates)
    return [
        Finding.error(
            "Bytecode Cache",
            f"No Bytecode-Cache found! Candidates: {listed}",
            remediation=(f"It's recommended to install any one of {listed}.",),
        )
    ]
