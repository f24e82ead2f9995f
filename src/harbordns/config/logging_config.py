from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "crit": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

_TAGS = {
    logging.DEBUG: "[debug]",
    logging.INFO: "[info]",
    logging.WARNING: "[warn]",
    logging.ERROR: "[error]",
    logging.CRITICAL: "[crit]",
}


def _level_tag(levelno: int) -> str:
    return _TAGS.get(levelno, f"[lvl{levelno}]")


class SyslogFormatter(logging.Formatter):
    """Formatter for syslog output without timestamps (syslog adds its own)."""

    def __init__(self, tag: str = "harbordns") -> None:
        super().__init__()
        self.tag = tag

    def format(self, record):
        """Prefix the program tag and level tag; no timestamp."""
        record.level_tag = _level_tag(record.levelno)
        prefix = f"{self.tag}: " if self.tag else ""
        return f"{prefix}{record.level_tag} {record.name}: {record.getMessage()}"


class BracketLevelFormatter(logging.Formatter):
    """Custom formatter that adds bracketed lowercase level tags and UTC timestamps."""

    def formatTime(self, record, datefmt=None):
        """Format the record's creation time as UTC ISO-8601 with Z suffix."""
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return created.strftime("%Y-%m-%dT%H:%M:%SZ")

    def format(self, record):
        """Add level_tag attribute and format the record."""
        record.level_tag = _level_tag(record.levelno)
        return super().format(record)


def resolve_level(value: Any) -> int:
    """Map a level name (debug/info/warn/error/crit) to a logging constant."""
    return _LEVELS.get(str(value or "info").lower(), logging.INFO)


def init_logging(cfg: Optional[Dict[str, Any]]) -> None:
    """
    Initialize logging configuration based on the provided config.

    Args:
        cfg: Logging configuration dictionary with optional keys:
            - level: debug, info, warn, error, crit (default: info)
            - stderr: boolean to log to stderr (default: True)
            - file: string path to log file (optional)
            - syslog: boolean or dict to enable syslog logging (optional)
                Can be a boolean (True uses defaults) or a dict with:
                - address: Unix socket path (default: /dev/log) or [host, port]
                - facility: syslog facility (default: USER)
                - tag: program identifier prepended to each message
                  (default: harbordns)

    Example config:
        {
            "level": "info",
            "stderr": True,
            "file": "./harbordns.log",
            "syslog": True  # or {"address": "/dev/log", "tag": "harbordns"}
        }
    """
    cfg = cfg or {}

    level = resolve_level(cfg.get("level", "info"))

    fmt = "%(asctime)s %(level_tag)s %(name)s: %(message)s"
    formatter = BracketLevelFormatter(fmt=fmt)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)

    if cfg.get("stderr", True):
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    file_path = cfg.get("file")
    if isinstance(file_path, str) and file_path.strip():
        path = os.path.abspath(os.path.expanduser(file_path.strip()))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    syslog_cfg = cfg.get("syslog")
    if syslog_cfg:
        try:
            if isinstance(syslog_cfg, dict):
                address = syslog_cfg.get("address", "/dev/log")
                if isinstance(address, list):
                    address = tuple(address)
                facility = getattr(
                    logging.handlers.SysLogHandler,
                    f"LOG_{str(syslog_cfg.get('facility', 'USER')).upper()}",
                    logging.handlers.SysLogHandler.LOG_USER,
                )
                tag = str(syslog_cfg.get("tag", "harbordns"))
            else:
                address = "/dev/log"
                facility = logging.handlers.SysLogHandler.LOG_USER
                tag = "harbordns"

            syslog_handler = logging.handlers.SysLogHandler(
                address=address, facility=facility
            )
            syslog_handler.setFormatter(SyslogFormatter(tag=tag))
            root.addHandler(syslog_handler)
        except (
            OSError,
            ValueError,
        ) as e:  # pragma: no cover - depends on a local syslog socket
            root.warning(f"Failed to configure syslog: {e}")

    logging.captureWarnings(True)
