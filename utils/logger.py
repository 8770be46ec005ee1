"""Logging helpers built on top of loguru."""

from __future__ import annotations

import os
import sys
import threading
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, TypeVar, cast

from loguru import logger as _logger
from loguru._logger import Logger as LoguruLogger
from tqdm.auto import tqdm

from utils.settings import logging as LOGCFG

LoggerType = LoguruLogger
T = TypeVar("T")

# capture threads may ask for loggers concurrently on first use
_lock = threading.Lock()
_is_configured = False
_log_dir = LOGCFG.log_dir
_log_file: Path | None = None


def _install_sinks(level: str, json_format: bool) -> None:
    global _is_configured, _log_file
    _logger.remove()
    os.makedirs(_log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    _log_file = Path(_log_dir) / f"touchcloud_{timestamp}.log.json"
    _logger.add(
        sys.stdout,
        level=level,
        format=LOGCFG.log_format,
        enqueue=True,
    )
    _logger.add(
        _log_file,
        level=level,
        serialize=json_format,
        format=LOGCFG.log_file_format,
        enqueue=True,
    )
    _is_configured = True


class Logger:
    """Project-wide logger wrapper using loguru and global config."""

    @staticmethod
    def get_logger(
        name: str, level: str | None = None, json_format: bool | None = None
    ) -> LoguruLogger:
        """
        Return a loguru logger bound to ``name`` (shown as ``module``).
        Sinks are installed on first use from ``utils.settings.logging``
        unless ``level``/``json_format`` override them.
        """
        with _lock:
            if not _is_configured:
                _install_sinks(
                    level or LOGCFG.level,
                    json_format if json_format is not None else LOGCFG.json,
                )
        return _logger.bind(module=name)

    @staticmethod
    def configure(
        level: str | None = None,
        log_dir: str | Path | None = None,
        json_format: bool | None = None,
    ) -> None:
        """Reinstall sinks, e.g. after the app config has been read."""
        global _log_dir
        with _lock:
            _log_dir = Path(log_dir) if log_dir is not None else LOGCFG.log_dir
            _install_sinks(
                level or LOGCFG.level,
                json_format if json_format is not None else LOGCFG.json,
            )

    @staticmethod
    def log_file() -> Path | None:
        """Path of the current file sink."""
        return _log_file

    @staticmethod
    def progress(
        iterable: Iterable[T],
        desc: str | None = None,
        total: int | None = None,
    ) -> Iterable[T]:
        """Return a tqdm iterator with unified style."""
        return cast(
            Iterable[T],
            tqdm(
                iterable,
                desc=desc,
                total=total,
                leave=False,
                bar_format=LOGCFG.progress_bar_format,
            ),
        )


@contextmanager
def log_duration(
    logger: LoguruLogger, label: str, threshold: float = 0.0
) -> Iterator[None]:
    """Log ``label`` with the elapsed time if it took longer than ``threshold`` sec."""
    start = time.monotonic()
    try:
        yield
    finally:
        elapsed = time.monotonic() - start
        if elapsed > threshold:
            logger.info(f"{label} took {elapsed * 1000:.1f} ms")
