"""
Database connection settings from a Magento 1 `app/etc/local.xml`.

Only the `default_setup` connection and the table prefix are read; the
rest of the file is the host application's business.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import URL

LOCAL_XML = Path("app") / "etc" / "local.xml"
DEFAULT_DRIVER = "mysql+pymysql"


@dataclass(frozen=True, slots=True)
class LocalDbConfig:
    host: str
    username: str
    password: str
    dbname: str
    table_prefix: str = ""
    unix_socket: str | None = None

    def url(self, drivername: str = DEFAULT_DRIVER) -> URL:
        host: str | None = self.host or None
        port: int | None = None
        query: dict[str, str] = {}
        socket_path = self.unix_socket
        if host and host.startswith("/"):
            socket_path, host = host, None
        elif host and ":" in host:
            name, _, tail = host.rpartition(":")
            if tail.isdigit():
                host, port = name, int(tail)
            else:
                host, socket_path = name, tail
        if socket_path:
            query["unix_socket"] = socket_path
        return URL.create(
            drivername,
            username=self.username or None,
            password=self.password or None,
            host=host,
            port=port,
            database=self.dbname or None,
            query=query,
        )


def _text(node: ET.Element | None, path: str) -> str:
    if node is None:
        return ""
    found = node.find(path)
    if found is None or found.text is None:
        return ""
    return found.text.strip()


def read_local_xml(root: Path) -> LocalDbConfig | None:
    """Return None when the file is absent or has no default connection."""
    path = Path(root) / LOCAL_XML
    if not path.is_file():
        return None
    tree = ET.parse(path)
    resources = tree.getroot().find("global/resources")
    if resources is None:
        return None
    conn = resources.find("default_setup/connection")
    if conn is None:
        return None
    unix_socket = _text(conn, "unix_socket") or None
    return LocalDbConfig(
        host=_text(conn, "host"),
        username=_text(conn, "username"),
        password=_text(conn, "password"),
        dbname=_text(conn, "dbname"),
        table_prefix=_text(resources, "db/table_prefix"),
        unix_socket=unix_socket,
    )
