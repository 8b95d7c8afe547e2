from __future__ import annotations

import json
from pathlib import Path

from magecheck.config import get_settings
from magecheck.doctor.bootstrap import build_context, run_system_check
from magecheck.probes.database import SqlDatabaseProber, UnconfiguredDatabaseProber
from magecheck.probes.sites import JsonSiteStore, SqlSiteStore, UnavailableSiteStore
from tests._helpers.fakes import shop_db


def test_nothing_configured_still_runs() -> None:
    ctx = build_context()
    assert isinstance(ctx.db_probe, UnconfiguredDatabaseProber)
    assert isinstance(ctx.sites, UnavailableSiteStore)

    report = run_system_check(ctx, groups=["database", "settings", "security"])
    assert report.groups == ("database", "settings", "security")
    assert all(f.severity == "ERROR" for f in report.findings)
    assert len(report.findings) == 5
    assert "app/etc/local.xml" in report.findings[0].detail


def test_sites_file_wins(tmp_path: Path) -> None:
    sites = tmp_path / "sites.json"
    config = {"web/unsecure/base_url": "http://a.example.com/"}
    sites.write_text(json.dumps({"sites": {"default": {"config": config}}}), encoding="utf-8")

    ctx = build_context(sites_file=sites)
    assert isinstance(ctx.sites, JsonSiteStore)
    assert ctx.config_reader is ctx.sites
    assert [s.unsecure_base_url for s in ctx.list_sites()] == ["http://a.example.com/"]


def test_broken_sites_file_is_reported_per_check(tmp_path: Path) -> None:
    sites = tmp_path / "sites.json"
    sites.write_text("[", encoding="utf-8")
    ctx = build_context(sites_file=sites)
    assert isinstance(ctx.sites, UnavailableSiteStore)

    report = run_system_check(ctx, groups=["settings"])
    assert [f.check for f in report.findings] == ["base_urls", "cookie_domain"]
    assert "SiteEnumerationError" in report.findings[0].detail


def test_db_url_opens_database_and_site_store(monkeypatch, tmp_path: Path) -> None:
    db = tmp_path / "shop.db"
    shop_db(db).dispose()
    monkeypatch.setenv("DB_URL", f"sqlite:///{db}")
    get_settings.cache_clear()

    ctx = build_context(root=tmp_path)
    assert isinstance(ctx.db_probe, SqlDatabaseProber)
    assert isinstance(ctx.sites, SqlSiteStore)
    assert [s.code for s in ctx.list_sites()] == ["default", "german"]
    assert ctx.root_path == tmp_path.resolve()
    assert ctx.security_timeout == 30.0

    report = run_system_check(ctx, groups=["settings"])
    assert report.overall_ok
