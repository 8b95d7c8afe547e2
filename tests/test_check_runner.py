from __future__ import annotations

import pytest

from magecheck.config import ConfigError
from magecheck.doctor.registry import default_groups, select_groups
from magecheck.utils.check_report import format_findings_text
from magecheck.utils.check_runner import CheckRunner, run_checks
from magecheck.utils.check_types import Check, CheckGroup, Finding
from tests._helpers.fakes import DownDatabase, FakeProber, make_context


def test_groups_run_in_declared_order() -> None:
    report = run_checks(make_context(), default_groups())

    assert report.groups == ("filesystem", "php", "security", "database", "settings")
    order: list[str] = []
    for f in report.findings:
        if not order or order[-1] != f.group:
            order.append(f.group)
    assert order == list(report.groups)
    assert report.overall_ok
    assert report.worst() == "OK"
    assert report.counts()["ERROR"] == 0


def test_findings_are_stamped_with_group_and_check() -> None:
    report = run_checks(make_context(), select_groups(["php"]))
    assert [(f.group, f.check) for f in report.findings] == [
        ("php", "required_extensions"),
        ("php", "required_extensions"),
        ("php", "bytecode_cache"),
    ]


def test_database_outage_does_not_stop_the_run() -> None:
    report = run_checks(make_context(db_probe=DownDatabase()), default_groups())

    db = report.for_group("database")
    assert [f.severity for f in db] == ["ERROR", "ERROR"]
    assert "DatabaseUnavailable" in db[0].detail
    assert "database" in db[0].detail
    assert db[0].subject == "db_version"
    assert report.for_group("settings")
    assert not report.overall_ok


def test_unexpected_exception_becomes_error_finding() -> None:
    def boom(context):
        raise RuntimeError("kaput")

    groups = [
        CheckGroup("first", (Check("boom", boom), Check("fine", lambda c: [Finding.ok("x", "y")]))),
        CheckGroup("second", (Check("fine", lambda c: [Finding.ok("z", "w")]),)),
    ]
    report = run_checks(make_context(), groups)

    assert [(f.group, f.check, f.severity) for f in report.findings] == [
        ("first", "boom", "ERROR"),
        ("first", "fine", "OK"),
        ("second", "fine", "OK"),
    ]
    assert "kaput" in report.findings[0].detail


def test_warnings_do_not_fail_the_run() -> None:
    groups = [CheckGroup("g", (Check("w", lambda c: [Finding.warning("x", "y")]),))]
    report = run_checks(make_context(), groups)
    assert report.counts() == {"OK": 0, "WARNING": 1, "ERROR": 0}
    assert report.overall_ok
    assert report.worst() == "WARNING"


def test_rerun_is_identical() -> None:
    ctx = make_context(security_probe=FakeProber(200))
    first = run_checks(ctx, default_groups())
    second = run_checks(ctx, default_groups())

    assert first.findings == second.findings
    assert first.counts() == second.counts()
    assert format_findings_text(first) == format_findings_text(second)


def test_parallel_matches_sequential() -> None:
    ctx = make_context(db_probe=DownDatabase())
    sequential = run_checks(ctx, default_groups())
    parallel = run_checks(ctx, default_groups(), parallel=True)
    assert parallel.findings == sequential.findings


def test_missing_required_folders_fails_at_construction() -> None:
    ctx = make_context(required_folders=None)
    with pytest.raises(ConfigError):
        CheckRunner(ctx, default_groups())


def test_group_list_must_be_valid() -> None:
    with pytest.raises(ConfigError):
        CheckRunner(make_context(), [])
    g = CheckGroup("dup", ())
    with pytest.raises(ConfigError):
        CheckRunner(make_context(), [g, g])


def test_select_groups() -> None:
    assert [g.name for g in select_groups(["settings", "PHP"])] == ["settings", "php"]
    assert [g.name for g in select_groups(None)] == [g.name for g in default_groups()]
    with pytest.raises(ConfigError):
        select_groups(["nope"])
