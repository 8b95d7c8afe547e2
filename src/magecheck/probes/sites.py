from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from magecheck.utils.check_types import Site, SiteEnumerationError

UNSECURE_BASE_URL = "web/unsecure/base_url"
SECURE_BASE_URL = "web/secure/base_url"
COOKIE_DOMAIN = "web/cookie/cookie_domain"


def _site_from(code: str, read) -> Site:  # noqa: ANN001
    cookie = read(COOKIE_DOMAIN)
    return Site(
        code=code,
        unsecure_base_url=read(UNSECURE_BASE_URL),
        secure_base_url=read(SECURE_BASE_URL),
        cookie_domain=cookie or None,
    )


class SiteEntry(BaseModel):
    website: str | None = None
    config: dict[str, str] = Field(default_factory=dict)


class SitesFile(BaseModel):
    default: dict[str, str] = Field(default_factory=dict)
    websites: dict[str, dict[str, str]] = Field(default_factory=dict)
    sites: dict[str, SiteEntry] = Field(default_factory=dict)


class JsonSiteStore:
    """
    Sites and per-site config from a JSON file.

    {
      "default":  {"web/unsecure/base_url": "http://shop.example.com/"},
      "websites": {"base": {"web/cookie/cookie_domain": "example.com"}},
      "sites":    {"default": {"website": "base", "config": {...}}}
    }

    Lookup order: site config, then its website, then default.
    """

    def __init__(self, data: SitesFile) -> None:
        self.data = data

    @classmethod
    def from_file(cls, path: str | Path) -> JsonSiteStore:
        p = Path(path)
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
            return cls(SitesFile.model_validate(raw))
        except (OSError, ValueError, ValidationError) as ex:
            raise SiteEnumerationError(f"cannot load sites file {p}: {ex}") from ex

    @classmethod
    def from_mapping(cls, raw: Mapping) -> JsonSiteStore:
        return cls(SitesFile.model_validate(dict(raw)))

    def _lookup(self, key: str, code: str) -> str:
        entry = self.data.sites.get(code)
        if entry is not None:
            if key in entry.config:
                return entry.config[key]
            if entry.website and key in self.data.websites.get(entry.website, {}):
                return self.data.websites[entry.website][key]
        return self.data.default.get(key, "")

    def list_sites(self) -> list[Site]:
        return [
            _site_from(code, lambda key, c=code: self._lookup(key, c)) for code in self.data.sites
        ]

    def read(self, key: str, site: Site) -> str:
        return str(self._lookup(key, site.code) or "")


class SqlSiteStore:
    """
    Sites and config straight from the shop database.

    Stores come from `core_store` (admin store 0 excluded); values from
    `core_config_data` with stores -> websites -> default scope fallback.
    Both tables are read once per instance.
    """

    def __init__(self, engine: Engine, *, table_prefix: str = "") -> None:
        self.engine = engine
        self.table_prefix = table_prefix or ""
        self._stores: dict[str, tuple[int, int]] | None = None
        self._config: dict[tuple[str, int, str], str] | None = None

    def _load(self) -> tuple[dict[str, tuple[int, int]], dict[tuple[str, int, str], str]]:
        if self._stores is not None and self._config is not None:
            return self._stores, self._config
        p = self.table_prefix
        try:
            with self.engine.connect() as conn:
                store_rows = conn.execute(
                    text(
                        f"SELECT store_id, code, website_id FROM {p}core_store "
                        "WHERE store_id <> 0 ORDER BY store_id"
                    )
                ).all()
                config_rows = conn.execute(
                    text(f"SELECT scope, scope_id, path, value FROM {p}core_config_data")
                ).all()
        except SQLAlchemyError as ex:
            raise SiteEnumerationError(f"cannot read stores from database: {ex}") from ex
        stores = {str(code): (int(sid), int(wid)) for sid, code, wid in store_rows}
        config = {
            (str(scope), int(scope_id), str(path)): "" if value is None else str(value)
            for scope, scope_id, path, value in config_rows
        }
        self._stores, self._config = stores, config
        return stores, config

    def _lookup(self, key: str, code: str) -> str:
        stores, config = self._load()
        store_id, website_id = stores.get(code, (-1, -1))
        for scope, scope_id in (("stores", store_id), ("websites", website_id), ("default", 0)):
            value = config.get((scope, scope_id, key))
            if value is not None:
                return value
        return ""

    def list_sites(self) -> list[Site]:
        stores, _ = self._load()
        return [_site_from(code, lambda key, c=code: self._lookup(key, c)) for code in stores]

    def read(self, key: str, site: Site) -> str:
        return self._lookup(key, site.code)


class UnavailableSiteStore:
    """Stands in when no site source could be opened; every use raises."""

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def list_sites(self) -> list[Site]:
        raise SiteEnumerationError(self.reason)

    def read(self, key: str, site: Site) -> str:
        raise SiteEnumerationError(self.reason)
