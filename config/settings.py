from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import SecretStr

from .public_config import PublicConfig
from .secret_config import SecretConfig


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Merged settings view (dot-access).

    Precedence:
      - secrets override public when names overlap
    """

    public: PublicConfig
    secret: SecretConfig

    def __getattr__(self, name: str) -> Any:
        if hasattr(self.secret, name):
            return getattr(self.secret, name)
        return getattr(self.public, name)

    def db_url_value(self) -> str:
        return _secret_value(self.secret.db_url)


def _secret_value(secret: SecretStr | None) -> str:
    try:
        return secret.get_secret_value() if secret else ""
    except Exception:
        return ""


def _validate(s: Settings) -> None:
    """
    Reject setups that would make every run meaningless.

    Empty requirement lists are allowed (they simply produce no findings);
    nonsensical probe tuning is not.
    """
    problems: list[str] = []
    if s.public.security_probe_timeout <= 0:
        problems.append("SECURITY_PROBE_TIMEOUT must be > 0")
    if s.public.php_timeout <= 0:
        problems.append("PHP_TIMEOUT must be > 0")
    if s.public.db_connect_timeout <= 0:
        problems.append("DB_CONNECT_TIMEOUT must be > 0")
    method = str(s.public.security_probe_method or "").strip().upper()
    if method not in {"GET", "POST"}:
        problems.append("SECURITY_PROBE_METHOD must be GET or POST")
    if not s.public.check_groups:
        problems.append("CHECK_GROUPS must name at least one group")
    if problems:
        raise ConfigError("Invalid configuration: " + "; ".join(problems))


def get_safe_config_report() -> dict[str, Any]:
    """
    Deterministic, non-sensitive config report.

    - Public values are included (paths are stringified)
    - Secret values are NEVER included; only SET/UNSET markers
    """
    s = get_settings()

    pub = s.public.model_dump()
    pub_s: dict[str, Any] = {}
    for k, v in pub.items():
        pub_s[k] = str(v) if hasattr(v, "__fspath__") else v

    sec: dict[str, str] = {}
    for k in sorted(type(s.secret).model_fields.keys()):
        v = getattr(s.secret, k, None)
        if v is None:
            sec[k] = "UNSET"
        elif isinstance(v, SecretStr):
            sec[k] = "SET" if v.get_secret_value() else "UNSET"
        else:
            sec[k] = "SET" if str(v).strip() else "UNSET"

    return {
        "public": pub_s,
        "secrets": sec,
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    public = PublicConfig()
    secret = SecretConfig()
    s = Settings(public=public, secret=secret)
    _validate(s)
    return s
