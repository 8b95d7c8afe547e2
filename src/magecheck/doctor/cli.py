from __future__ import annotations

import json
from pathlib import Path

import click
from pydantic import ValidationError

from magecheck.config import ConfigError, get_safe_config_report, get_settings
from magecheck.doctor import bootstrap
from magecheck.doctor.registry import default_groups
from magecheck.utils.check_redaction import redact
from magecheck.utils.check_report import (
    MARKERS,
    format_report_json,
    format_report_text,
    format_summary,
)
from magecheck.utils.check_runner import write_report
from magecheck.utils.check_types import RunReport
from magecheck.utils.log import set_log_level

_STYLES = {"OK": "green", "WARNING": "yellow", "ERROR": "red"}


def _echo_report(report: RunReport) -> None:
    for name in report.groups:
        title = report.group_titles.get(name, name)
        click.secho(f"\nCheck: {title}", bold=True)
        click.echo("-" * (len(title) + 7))
        for f in report.for_group(name):
            scope = f"Store: {f.scope} " if f.scope else ""
            marker = click.style(MARKERS[f.severity], fg=_STYLES[f.severity])
            click.echo(f"{marker} " + redact(f"{scope}{f.subject}: {f.detail}"))
            if f.severity != "OK":
                for hint in f.remediation:
                    click.secho(f"    {redact(hint)}", dim=True)
    click.echo("")
    click.secho(format_summary(report), fg=_STYLES[report.worst()], bold=True)


@click.group(name="magecheck")
def cli() -> None:
    """
    Shop installation diagnostics.
    """


@cli.command(name="check")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Installation root (default: MAGE_ROOT or cwd).",
)
@click.option(
    "--sites-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file describing sites and their config (default: read from the database).",
)
@click.option(
    "--group",
    "group_names",
    multiple=True,
    help="Run only these groups, in this order (repeatable).",
)
@click.option("--parallel", is_flag=True, default=False, help="Run groups concurrently.")
@click.option(
    "--write-report",
    "write_report_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write report to this path.",
)
@click.option(
    "--json",
    "json_flag",
    is_flag=True,
    default=False,
    help="Also write a JSON report (printed to stdout without --write-report).",
)
@click.option("--log-level", default=None, help="Override LOG_LEVEL.")
def check(
    root: Path | None,
    sites_file: Path | None,
    group_names: tuple[str, ...],
    parallel: bool,
    write_report_path: Path | None,
    json_flag: bool,
    log_level: str | None,
) -> None:
    """
    Checks the installation: filesystem, PHP, security, MySQL, settings.
    """
    if log_level:
        set_log_level(log_level)
    try:
        s = get_settings()
        context = bootstrap.build_context(s, root=root, sites_file=sites_file)
        report = bootstrap.run_system_check(
            context,
            groups=list(group_names) or s.check_groups,
            parallel=parallel or bool(s.parallel_groups),
        )
    except (ConfigError, ValidationError) as ex:
        click.secho(f"Configuration error: {ex}", fg="red", err=True)
        raise SystemExit(1) from ex

    report_path = write_report_path or s.report_path
    if json_flag and not report_path:
        click.echo(json.dumps(format_report_json(report), indent=2, sort_keys=True))
    else:
        _echo_report(report)

    if report_path:
        text = format_report_text(report)
        json_data = format_report_json(report) if json_flag else None
        write_report(report_path, text=text, json_data=json_data)
        click.echo(f"Report: {report_path}")
        if json_flag:
            click.echo(f"Report (json): {report_path}.json")

    if not report.overall_ok:
        raise SystemExit(2)


@cli.command(name="list")
def list_checks() -> None:
    """List registered check groups and their checks."""
    for g in default_groups():
        click.echo(f"{g.name} ({g.label})")
        for c in g.checks:
            click.echo(f"  - {c.name}")


@cli.command(name="config")
def show_config() -> None:
    """Print the effective configuration (secrets shown as SET/UNSET)."""
    try:
        report = get_safe_config_report()
    except (ConfigError, ValidationError) as ex:
        click.secho(f"Configuration error: {ex}", fg="red", err=True)
        raise SystemExit(1) from ex
    click.echo(json.dumps(report, indent=2, sort_keys=True, default=str))


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
