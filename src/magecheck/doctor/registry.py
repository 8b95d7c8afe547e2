from __future__ import annotations

from collections.abc import Iterable

from magecheck.config import ConfigError
from magecheck.doctor.database import check_db_engine, check_db_version
from magecheck.doctor.filesystem import check_files, check_folders
from magecheck.doctor.php import check_bytecode_cache, check_required_extensions
from magecheck.doctor.security import check_local_xml_exposure
from magecheck.doctor.settings import check_base_urls, check_cookie_domain
from magecheck.utils.check_types import Check, CheckGroup


def default_groups() -> list[CheckGroup]:
    return [
        CheckGroup(
            name="filesystem",
            title="Filesystem",
            checks=(
                Check("folders", check_folders),
                Check("files", check_files),
            ),
        ),
        CheckGroup(
            name="php",
            title="PHP",
            checks=(
                Check("required_extensions", check_required_extensions),
                Check("bytecode_cache", check_bytecode_cache),
            ),
        ),
        CheckGroup(
            name="security",
            title="Security",
            checks=(Check("local_xml_exposure", check_local_xml_exposure),),
        ),
        CheckGroup(
            name="database",
            title="MySQL",
            checks=(
                Check("db_version", check_db_version),
                Check("db_engine", check_db_engine),
            ),
        ),
        CheckGroup(
            name="settings",
            title="Settings",
            checks=(
                Check("base_urls", check_base_urls),
                Check("cookie_domain", check_cookie_domain),
            ),
        ),
    ]


def select_groups(names: Iterable[str] | None = None) -> list[CheckGroup]:
    """Registered groups in the requested order (all, in default order, when `names` is empty)."""
    groups = default_groups()
    wanted = [str(n).strip().lower() for n in (names or []) if str(n).strip()]
    if not wanted:
        return groups
    by_name = {g.name: g for g in groups}
    unknown = [n for n in wanted if n not in by_name]
    if unknown:
        raise ConfigError(
            f"Unknown check group(s): {', '.join(unknown)}. Known: {', '.join(by_name)}"
        )
    out: list[CheckGroup] = []
    for n in wanted:
        if by_name[n] not in out:
            out.append(by_name[n])
    return out
