from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable
from pathlib import Path

from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from magecheck.config import Settings, get_settings
from magecheck.doctor.registry import select_groups
from magecheck.probes.database import (
    SqlDatabaseProber,
    UnconfiguredDatabaseProber,
    make_engine,
)
from magecheck.probes.filesystem import LocalFilesystem
from magecheck.probes.http import UrllibProber
from magecheck.probes.local_xml import read_local_xml
from magecheck.probes.php import PhpExtensionRegistry
from magecheck.probes.sites import JsonSiteStore, SqlSiteStore, UnavailableSiteStore
from magecheck.utils.check_runner import CheckRunner
from magecheck.utils.check_types import CheckContext, RunReport, SiteEnumerationError
from magecheck.utils.log import logger


def _open_database(s: Settings, root: Path) -> tuple[Engine | None, str, str]:
    """
    Returns (engine, table_prefix, reason); reason explains a missing engine.

    DB_URL wins over the connection declared in app/etc/local.xml.
    """
    prefix = s.db_table_prefix
    url: str | URL = s.db_url_value()
    if not url:
        try:
            local = read_local_xml(root)
        except (OSError, ET.ParseError) as ex:
            return None, prefix or "", f"cannot read app/etc/local.xml: {type(ex).__name__}: {ex}"
        if local is None:
            return None, prefix or "", "no DB_URL set and no connection in app/etc/local.xml"
        url = local.url()
        if prefix is None:
            prefix = local.table_prefix
    try:
        engine = make_engine(url, connect_timeout=s.db_connect_timeout)
    except (SQLAlchemyError, ImportError) as ex:
        return None, prefix or "", f"cannot create database engine: {type(ex).__name__}: {ex}"
    return engine, prefix or "", ""


def build_context(
    settings: Settings | None = None,
    *,
    root: Path | None = None,
    sites_file: Path | None = None,
) -> CheckContext:
    s = settings or get_settings()
    root_path = Path(root or s.root_path).resolve()

    engine, prefix, db_reason = _open_database(s, root_path)
    if engine is not None:
        db_probe = SqlDatabaseProber(engine)
    else:
        logger.warning("database_unconfigured", reason=db_reason)
        db_probe = UnconfiguredDatabaseProber(db_reason)

    sites_path = sites_file or s.sites_file
    if sites_path:
        try:
            sites = JsonSiteStore.from_file(sites_path)
        except SiteEnumerationError as ex:
            sites = UnavailableSiteStore(str(ex))
    elif engine is not None:
        sites = SqlSiteStore(engine, table_prefix=prefix)
    else:
        sites = UnavailableSiteStore(f"no SITES_FILE set and no database: {db_reason}")

    return CheckContext(
        root_path=root_path,
        required_folders=s.required_folders,
        required_files=s.required_files,
        required_extensions=tuple(s.required_extensions),
        bytecode_cache_candidates=tuple(s.bytecode_cache_extensions),
        filesystem=LocalFilesystem(),
        extensions=PhpExtensionRegistry(s.php_bin, timeout=s.php_timeout),
        sites=sites,
        config_reader=sites,
        security_probe=UrllibProber(s.security_probe_method),
        db_probe=db_probe,
        security_probe_path=s.security_probe_path,
        security_timeout=float(s.security_probe_timeout),
        min_db_version=s.min_db_version,
        required_db_engine=s.required_db_engine,
    )


def run_system_check(
    context: CheckContext,
    *,
    groups: Iterable[str] | None = None,
    parallel: bool = False,
) -> RunReport:
    runner = CheckRunner(context, select_groups(groups), parallel=parallel)
    return runner.run()
