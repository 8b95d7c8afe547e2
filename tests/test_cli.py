from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from magecheck.doctor import bootstrap
from magecheck.doctor.cli import cli
from tests._helpers.fakes import FakeProber, make_context


def _patch_context(monkeypatch, **overrides) -> list[dict]:
    calls: list[dict] = []

    def fake_build(settings=None, *, root=None, sites_file=None):
        calls.append({"root": root, "sites_file": sites_file})
        return make_context(**overrides)

    monkeypatch.setattr(bootstrap, "build_context", fake_build)
    return calls


def test_list_shows_groups_and_checks() -> None:
    result = CliRunner().invoke(cli, ["list"])
    assert result.exit_code == 0
    assert "filesystem (Filesystem)" in result.output
    assert "database (MySQL)" in result.output
    assert "  - local_xml_exposure" in result.output


def test_check_passes(monkeypatch, tmp_path: Path) -> None:
    calls = _patch_context(monkeypatch)
    result = CliRunner().invoke(cli, ["check", "--root", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "Check: Filesystem" in result.output
    assert "[OK] Folder media: found." in result.output
    assert "PASSED: " in result.output
    assert calls == [{"root": tmp_path, "sites_file": None}]


def test_check_fails_with_exit_code_2(monkeypatch) -> None:
    _patch_context(monkeypatch, security_probe=FakeProber(200))
    result = CliRunner().invoke(cli, ["check"])

    assert result.exit_code == 2
    assert "[ERROR] Store: default app/etc/local.xml" in result.output
    assert "FAILED: " in result.output


def test_check_selected_groups(monkeypatch) -> None:
    _patch_context(monkeypatch, security_probe=FakeProber(200))
    result = CliRunner().invoke(cli, ["check", "--group", "settings", "--group", "php"])

    assert result.exit_code == 0
    headings = [line for line in result.output.splitlines() if line.startswith("Check: ")]
    assert headings == ["Check: Settings", "Check: PHP"]


def test_unknown_group_is_a_config_error(monkeypatch) -> None:
    _patch_context(monkeypatch)
    result = CliRunner().invoke(cli, ["check", "--group", "nope"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_check_json_to_stdout(monkeypatch) -> None:
    _patch_context(monkeypatch)
    result = CliRunner().invoke(cli, ["check", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["overall_ok"] is True
    assert [g["name"] for g in payload["groups"]][0] == "filesystem"


def test_check_writes_reports(monkeypatch, tmp_path: Path) -> None:
    _patch_context(monkeypatch)
    out = tmp_path / "reports" / "check.txt"
    result = CliRunner().invoke(cli, ["check", "--write-report", str(out), "--json"])

    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8").startswith("System Check Report")
    payload = json.loads(Path(f"{out}.json").read_text(encoding="utf-8"))
    assert payload["summary"]["ERROR"] == 0


def test_invalid_config_exits_1(monkeypatch) -> None:
    monkeypatch.setenv("SECURITY_PROBE_TIMEOUT", "0")
    result = CliRunner().invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_config_command_hides_secrets(monkeypatch) -> None:
    monkeypatch.setenv("DB_URL", "mysql+pymysql://magento:s3cret@db/shop")
    result = CliRunner().invoke(cli, ["config"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["secrets"]["db_url"] == "SET"
    assert "s3cret" not in result.output
