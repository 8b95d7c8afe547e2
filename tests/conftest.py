from __future__ import annotations

from collections.abc import Iterator

import pytest

from magecheck.config import get_settings

_ENV_KEYS = (
    "MAGE_ROOT",
    "SITES_FILE",
    "DB_URL",
    "DB_TABLE_PREFIX",
    "REQUIRED_FOLDERS",
    "REQUIRED_FILES",
    "REQUIRED_EXTENSIONS",
    "BYTECODE_CACHE_EXTENSIONS",
    "CHECK_GROUPS",
    "PARALLEL_GROUPS",
    "REPORT_PATH",
    "SECURITY_PROBE_TIMEOUT",
    "SECURITY_PROBE_METHOD",
    "LOG_DIR",
)


@pytest.fixture(autouse=True)
def _test_env(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    root = tmp_path_factory.mktemp("mc_test")
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # keep stray .env / .env.secrets files out of the settings
    monkeypatch.chdir(root)
    monkeypatch.setenv("MAGE_ROOT", str(root))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
