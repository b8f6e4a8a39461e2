from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def as_utc(dt: datetime) -> datetime:
    # naive datetimes are taken to be UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def dt_to_utc_iso(dt: datetime) -> str:
    return as_utc(dt).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def utc_iso_to_dt(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return a logger named `checkssl.<name>`.

    The package logger gets a stderr handler on first use. Its level comes
    from the CHECKSSL_LOG environment variable when that names a valid level,
    otherwise WARNING.
    """
    root = logging.getLogger("checkssl")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATEFMT))
        root.addHandler(handler)

        env_level = os.getenv("CHECKSSL_LOG", "").upper()
        root.setLevel(getattr(logging, env_level) if env_level in _LEVELS else logging.WARNING)
        root.propagate = False

    return root.getChild(name) if name else root


def set_log_level(level: str) -> None:
    level = level.upper()
    if level not in _LEVELS:
        raise ValueError(f"unknown log level: {level}")
    get_logger().setLevel(getattr(logging, level))
