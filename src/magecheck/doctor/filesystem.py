from __future__ import annotations

from magecheck.utils.check_types import CheckContext, Finding


def check_folders(context: CheckContext) -> list[Finding]:
    """One finding per declared folder, in declaration order."""
    findings: list[Finding] = []
    for folder, comment in context.required_folders.items():
        path = context.root_path / folder
        usage = f"Usage: {comment}"
        if not context.filesystem.exists(path):
            findings.append(
                Finding.error(f"Folder {folder}", f"not found! {usage}", remediation=(usage,))
            )
        elif not context.filesystem.is_writable(path):
            findings.append(
                Finding.warning(f"Folder {folder}", f"not writable! {usage}", remediation=(usage,))
            )
        else:
            findings.append(Finding.ok(f"Folder {folder}", "found."))
    return findings


def check_files(context: CheckContext) -> list[Finding]:
    findings: list[Finding] = []
    for file, comment in context.required_files.items():
        usage = f"Usage: {comment}"
        if context.filesystem.exists(context.root_path / file):
            findings.append(Finding.ok(f"File {file}", "found."))
        else:
            findings.append(
                Finding.error(f"File {file}", f"not found! {usage}", remediation=(usage,))
            )
    return findings
