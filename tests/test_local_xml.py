from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from magecheck.probes.local_xml import LocalDbConfig, read_local_xml

LOCAL_XML = """<?xml version="1.0"?>
<config>
    <global>
        <resources>
            <db>
                <table_prefix><![CDATA[mg_]]></table_prefix>
            </db>
            <default_setup>
                <connection>
                    <host><![CDATA[db.internal:3307]]></host>
                    <username><![CDATA[magento]]></username>
                    <password><![CDATA[s3cret]]></password>
                    <dbname><![CDATA[shop]]></dbname>
                    <active>1</active>
                </connection>
            </default_setup>
        </resources>
    </global>
</config>
"""


def _write(root: Path, body: str) -> None:
    path = root / "app" / "etc" / "local.xml"
    path.parent.mkdir(parents=True)
    path.write_text(body, encoding="utf-8")


def test_reads_default_connection(tmp_path: Path) -> None:
    _write(tmp_path, LOCAL_XML)
    cfg = read_local_xml(tmp_path)

    assert cfg == LocalDbConfig(
        host="db.internal:3307",
        username="magento",
        password="s3cret",
        dbname="shop",
        table_prefix="mg_",
    )
    url = cfg.url()
    assert url.drivername == "mysql+pymysql"
    assert (url.host, url.port, url.username, url.password, url.database) == (
        "db.internal",
        3307,
        "magento",
        "s3cret",
        "shop",
    )


def test_socket_hosts() -> None:
    by_path = LocalDbConfig("/var/run/mysqld/mysqld.sock", "u", "p", "shop").url()
    assert by_path.host is None
    assert by_path.query["unix_socket"] == "/var/run/mysqld/mysqld.sock"

    by_suffix = LocalDbConfig("localhost:/tmp/mysql.sock", "u", "p", "shop").url()
    assert by_suffix.host == "localhost"
    assert by_suffix.port is None
    assert by_suffix.query["unix_socket"] == "/tmp/mysql.sock"


def test_missing_file_or_connection(tmp_path: Path) -> None:
    assert read_local_xml(tmp_path) is None
    _write(tmp_path, "<config><global><resources/></global></config>")
    assert read_local_xml(tmp_path) is None


def test_malformed_file_raises(tmp_path: Path) -> None:
    _write(tmp_path, "<config><global>")
    with pytest.raises(ET.ParseError):
        read_local_xml(tmp_path)
