from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Any

from magecheck.config import ConfigError
from magecheck.utils.check_redaction import redact, redact_obj
from magecheck.utils.check_types import (
    Check,
    CheckContext,
    CheckGroup,
    Finding,
    RunReport,
)
from magecheck.utils.log import logger

_REQUIRED_CONTEXT_FIELDS = (
    "required_folders",
    "required_files",
    "required_extensions",
    "bytecode_cache_candidates",
)


def _build_metadata(context: CheckContext) -> dict[str, Any]:
    ts = datetime.now(tz=timezone.utc).isoformat()
    try:
        app_version = metadata.version("magecheck")
    except Exception:
        app_version = None
    return {
        "timestamp": ts,
        "app_version": app_version,
        "root_path": str(context.root_path),
    }


def _validate_context(context: CheckContext) -> None:
    missing = [name for name in _REQUIRED_CONTEXT_FIELDS if getattr(context, name, None) is None]
    if missing:
        raise ConfigError("Check context is missing: " + ", ".join(missing))


def _validate_groups(groups: Sequence[CheckGroup]) -> None:
    if not groups:
        raise ConfigError("No check groups configured")
    seen: set[str] = set()
    for g in groups:
        if g.name in seen:
            raise ConfigError(f"Duplicate check group: {g.name}")
        seen.add(g.name)


def _failure_finding(group: CheckGroup, check: Check, ex: BaseException) -> Finding:
    return Finding.error(
        check.name,
        f"Check '{check.name}' in group '{group.name}' failed: {type(ex).__name__}: {ex}",
    )


class CheckRunner:
    """
    Runs check groups against a read-only context and assembles a RunReport.

    A failing check never aborts the run: its exception becomes a single
    ERROR finding and the next check starts.
    """

    def __init__(
        self,
        context: CheckContext,
        groups: Sequence[CheckGroup],
        *,
        parallel: bool = False,
    ) -> None:
        _validate_context(context)
        _validate_groups(groups)
        self.context = context
        self.groups = tuple(groups)
        self.parallel = bool(parallel)

    def _run_check(self, group: CheckGroup, check: Check) -> list[Finding]:
        logger.info("check_start", group=group.name, check=check.name)
        try:
            produced = list(check.evaluate(self.context))
            for f in produced:
                if not isinstance(f, Finding):
                    raise TypeError("Check did not return Finding objects")
        except Exception as ex:
            logger.warning(
                "check_failed",
                group=group.name,
                check=check.name,
                error=f"{type(ex).__name__}: {ex}",
            )
            produced = [_failure_finding(group, check, ex)]
        stamped = [replace(f, group=group.name, check=check.name) for f in produced]
        logger.info(
            "check_done",
            group=group.name,
            check=check.name,
            findings=len(stamped),
            severities=[f.severity for f in stamped],
        )
        return stamped

    def _run_group(self, group: CheckGroup) -> list[Finding]:
        findings: list[Finding] = []
        for check in group.checks:
            findings.extend(self._run_check(group, check))
        return findings

    def run(self) -> RunReport:
        meta = _build_metadata(self.context)
        logger.info(
            "check_run_start",
            metadata=redact_obj(meta),
            groups=[g.name for g in self.groups],
            parallel=self.parallel,
        )

        if self.parallel and len(self.groups) > 1:
            with ThreadPoolExecutor(max_workers=len(self.groups)) as pool:
                per_group = list(pool.map(self._run_group, self.groups))
        else:
            per_group = [self._run_group(g) for g in self.groups]

        findings: list[Finding] = []
        for group_findings in per_group:
            findings.extend(group_findings)

        report = RunReport(
            metadata=meta,
            groups=tuple(g.name for g in self.groups),
            findings=tuple(findings),
            group_titles={g.name: g.label for g in self.groups},
        )
        logger.info("check_run_done", summary=report.counts(), overall_ok=report.overall_ok)
        return report


def run_checks(
    context: CheckContext,
    groups: Sequence[CheckGroup],
    *,
    parallel: bool = False,
) -> RunReport:
    return CheckRunner(context, groups, parallel=parallel).run()


def _atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def write_report(
    path: str | Path,
    *,
    text: str | None = None,
    json_data: dict[str, Any] | None = None,
) -> None:
    if text is None and json_data is None:
        raise ValueError("write_report requires text or json_data")
    target = Path(path)
    if text is not None:
        _atomic_write_text(target, redact(text))
    if json_data is not None:
        blob = json.dumps(redact_obj(json_data), indent=2, sort_keys=True) + "\n"
        if text is None:
            _atomic_write_text(target, blob)
        else:
            _atomic_write_text(target.with_suffix(target.suffix + ".json"), blob)


__all__ = ["CheckRunner", "run_checks", "write_report"]
