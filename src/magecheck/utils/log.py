from __future__ import annotations

import logging
import sys
from contextlib import suppress
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

from magecheck.config import get_settings
from magecheck.utils.check_redaction import redact


def redact_event(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    for k, v in list(event_dict.items()):
        if isinstance(v, str):
            event_dict[k] = redact(v)
    return event_dict


def rename_event_to_msg(_, __, event_dict: dict[str, Any]) -> dict[str, Any]:
    if "msg" not in event_dict and "event" in event_dict:
        event_dict["msg"] = event_dict.pop("event")
    return event_dict


def _settings_or_defaults() -> tuple[str, Path | None, int, int]:
    # Logging must come up even when the config is invalid; the CLI reports that error itself.
    try:
        s = get_settings()
        return str(s.log_level), s.log_dir, int(s.log_max_bytes), int(s.log_backup_count)
    except Exception:
        return "WARNING", None, 5 * 1024 * 1024, 3


def _configure_structlog() -> structlog.stdlib.BoundLogger:
    level, log_dir, max_bytes, backup_count = _settings_or_defaults()

    root = logging.getLogger()
    root.setLevel(str(level).upper())

    # Avoid duplicates if re-imported
    if getattr(root, "_magecheck_structlog_configured", False):
        return structlog.get_logger("magecheck")

    foreign_pre_chain = [
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
        structlog.stdlib.add_log_level,
        redact_event,
        structlog.processors.format_exc_info,
        rename_event_to_msg,
    ]

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=foreign_pre_chain,
    )

    # stdout carries the report; logs go to stderr.
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)

    root.handlers.clear()
    root.addHandler(stream_handler)

    if log_dir is not None:
        log_path = Path(log_dir) / "magecheck.log"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.stdlib.add_log_level,
            redact_event,
            structlog.processors.format_exc_info,
            rename_event_to_msg,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root._magecheck_structlog_configured = True
    return structlog.get_logger("magecheck")


logger = _configure_structlog()


def set_log_level(level: str) -> None:
    """
    Best-effort runtime log level override (CLI convenience).
    Does not change handlers/formatters; only raises/lowers filtering level.
    """
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(lvl)
    for h in root.handlers:
        with suppress(Exception):
            h.setLevel(lvl)
