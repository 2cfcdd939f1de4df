from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union
import os
import sys

# Tag configured loggers so repeated CLI/cron invocations don't stack handlers.
_DSS_LOGGER_MARK = "_dss_logger_configured"

# timestamp | level | thread | logger | message  (worker threads interleave)
_DEFAULT_FMT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at DEBUG (one line per HTTP connection).
_NOISY_LOGGERS = ("urllib3", "requests")

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


def _coerce_level(level: Optional[Union[int, str]]) -> int:
    """
    Accepts logging levels as int or str (e.g., 'INFO', 'debug').
    Falls back to LOG_LEVEL env, then INFO.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL") or None

    if isinstance(level, int):
        return level
    if isinstance(level, str):
        return _LEVELS.get(level.strip().upper(), logging.INFO)
    return logging.INFO


def quiet_third_party(level: int = logging.WARNING) -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(
    name: Optional[str] = None,
    *,
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    propagate: bool = False,
    fmt: str = _DEFAULT_FMT,
    datefmt: str = _DEFAULT_DATEFMT,
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Create/configure a logger. Safe to call multiple times:
    - existing console/file targets are reused, never duplicated
    - a file target can be added on a later call
    Child loggers (``delivery_status_sync.pipelines.worker`` etc.) inherit the
    handlers through propagation, so configure the package root once.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_coerce_level(level))
    logger.propagate = propagate

    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    has_console = any(
        isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
        and getattr(h, "stream", None) in (sys.stderr, sys.stdout)
        for h in logger.handlers
    )
    if console and not has_console:
        sh = logging.StreamHandler(stream=sys.stderr)
        sh.setFormatter(formatter)
        sh.setLevel(logger.level)
        logger.addHandler(sh)

    if log_file is not None:
        log_path = Path(log_file)
        has_file = any(
            isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(log_path)
            for h in logger.handlers
        )
        if not has_file:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
                delay=True,
            )
            fh.setFormatter(formatter)
            fh.setLevel(logger.level)
            logger.addHandler(fh)

    if logger.level > logging.DEBUG:
        quiet_third_party()

    setattr(logger, _DSS_LOGGER_MARK, True)
    return logger
