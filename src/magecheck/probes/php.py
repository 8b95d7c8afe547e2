from __future__ import annotations

import subprocess
from collections.abc import Iterable

from magecheck.utils.check_types import ExtensionRegistryUnavailable
from magecheck.utils.log import logger


def parse_php_modules(output: str) -> set[str]:
    """
    Parse `php -m` output.

    Section headers ("[PHP Modules]", "[Zend Modules]") are skipped; names
    are lowercased because extension_loaded() is case-insensitive.
    """
    mods: set[str] = set()
    for line in (output or "").splitlines():
        name = line.strip()
        if not name or name.startswith("["):
            continue
        mods.add(name.lower())
    return mods


class StaticExtensionRegistry:
    def __init__(self, loaded: Iterable[str]) -> None:
        self._loaded = {str(x).strip().lower() for x in loaded}

    def is_loaded(self, name: str) -> bool:
        return str(name).strip().lower() in self._loaded


class PhpExtensionRegistry:
    """Asks the PHP CLI which modules it loads; queried once per instance."""

    def __init__(self, php_bin: str = "php", *, timeout: float = 10.0) -> None:
        self.php_bin = php_bin
        self.timeout = timeout
        self._loaded: set[str] | None = None

    def _modules(self) -> set[str]:
        if self._loaded is not None:
            return self._loaded
        try:
            res = subprocess.run(
                [self.php_bin, "-m"],
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as ex:
            raise ExtensionRegistryUnavailable(f"cannot run '{self.php_bin} -m': {ex}") from ex
        if res.returncode != 0:
            err = (res.stderr or res.stdout or "").strip().splitlines()
            raise ExtensionRegistryUnavailable(
                f"'{self.php_bin} -m' exited with {res.returncode}: {err[0] if err else ''}"
            )
        self._loaded = parse_php_modules(res.stdout)
        logger.info("php_modules_loaded", php_bin=self.php_bin, count=len(self._loaded))
        return self._loaded

    def is_loaded(self, name: str) -> bool:
        return str(name).strip().lower() in self._modules()
