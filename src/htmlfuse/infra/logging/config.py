from __future__ import annotations

"""
Logging Configuration Models.

Settings consumed by `configure_logging`. The console stream shares stderr
with the CLI report (stdout carries the bundled document), and file entries
name the emitting thread so records of the concurrent inliner workers can
be told apart.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# HTTP and parsing libraries that chatter at DEBUG during remote fetches
LIBRARY_LOGGERS: Tuple[str, ...] = ("urllib3", "requests", "charset_normalizer", "bs4")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging subsystem.

    Attributes:
        level: Minimum severity captured from htmlfuse loggers.
        console: Stream records to stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size of a log segment before rotation.
        backup_count: Rotated segments kept.
        library_level: Level applied to `library_loggers`, independent of
                       `level`, so `--debug` shows bundling decisions only.
        library_loggers: Third-party logger names held at `library_level`.
        console_fmt: Terminal record format.
        file_fmt: File record format (includes the thread name).
        datefmt: Timestamp format of file records.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 512 * 1024
    backup_count: int = 3

    library_level: str = "WARNING"
    library_loggers: Tuple[str, ...] = LIBRARY_LOGGERS

    console_fmt: str = "htmlfuse | %(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
