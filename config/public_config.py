from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_root() -> Path:
    """
    Default installation root.

    MAGE_ROOT wins; otherwise the current working directory is inspected.
    """
    env = os.environ.get("MAGE_ROOT")
    if env:
        return Path(env).resolve()
    return Path.cwd().resolve()


DEFAULT_REQUIRED_FOLDERS: dict[str, str] = {
    "media": "Used for images and other media files.",
    "var": "Used for caching, reports, etc.",
    "var/cache": "Used for caching",
    "var/session": "Used as file-based session save",
}

DEFAULT_REQUIRED_FILES: dict[str, str] = {
    "app/etc/local.xml": "Magento local configuration.",
    "index.php.sample": "Used to generate staging websites in Magento enterprise edition",
}

DEFAULT_REQUIRED_EXTENSIONS: list[str] = [
    "simplexml",
    "mcrypt",
    "hash",
    "gd",
    "dom",
    "iconv",
    "curl",
    "soap",
    "pdo",
    "pdo_mysql",
]

DEFAULT_BYTECODE_CACHE_EXTENSIONS: list[str] = [
    "apc",
    "eaccelerator",
    "xcache",
    "Zend Optimizer",
    "Zend OPcache",
]

DEFAULT_CHECK_GROUPS: list[str] = ["filesystem", "php", "security", "database", "settings"]


class PublicConfig(BaseSettings):
    """
    Non-sensitive config with safe defaults.

    Loaded from (in order):
      - process env
      - optional `.env` file

    Mapping and list fields accept JSON, e.g.
      REQUIRED_FOLDERS='{"var": "Cache, session and log files"}'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- installation ---
    root_path: Path = Field(default_factory=_default_root, alias="MAGE_ROOT")
    sites_file: Path | None = Field(default=None, alias="SITES_FILE")

    # --- filesystem / php requirements ---
    required_folders: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_REQUIRED_FOLDERS), alias="REQUIRED_FOLDERS"
    )
    required_files: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_REQUIRED_FILES), alias="REQUIRED_FILES"
    )
    required_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REQUIRED_EXTENSIONS), alias="REQUIRED_EXTENSIONS"
    )
    bytecode_cache_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BYTECODE_CACHE_EXTENSIONS),
        alias="BYTECODE_CACHE_EXTENSIONS",
    )
    php_bin: str = Field(default="php", alias="PHP_BIN")
    php_timeout: float = Field(default=10.0, alias="PHP_TIMEOUT")

    # --- security probe ---
    security_probe_path: str = Field(default="app/etc/local.xml", alias="SECURITY_PROBE_PATH")
    security_probe_timeout: float = Field(default=30.0, alias="SECURITY_PROBE_TIMEOUT")
    security_probe_method: str = Field(default="POST", alias="SECURITY_PROBE_METHOD")  # GET|POST

    # --- database ---
    min_db_version: str = Field(default="4.1.20", alias="MIN_DB_VERSION")
    required_db_engine: str = Field(default="InnoDB", alias="REQUIRED_DB_ENGINE")
    db_connect_timeout: int = Field(default=10, alias="DB_CONNECT_TIMEOUT")
    db_table_prefix: str | None = Field(default=None, alias="DB_TABLE_PREFIX")

    # --- run ---
    check_groups: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CHECK_GROUPS), alias="CHECK_GROUPS"
    )
    parallel_groups: bool = Field(default=False, alias="PARALLEL_GROUPS")
    report_path: Path | None = Field(default=None, alias="REPORT_PATH")

    # --- logging ---
    log_level: str = Field(default="WARNING", alias="LOG_LEVEL")
    log_dir: Path | None = Field(default=None, alias="LOG_DIR")
    log_max_bytes: int = Field(default=5 * 1024 * 1024, alias="LOG_MAX_BYTES")
    log_backup_count: int = Field(default=3, alias="LOG_BACKUP_COUNT")
