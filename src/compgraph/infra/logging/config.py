from __future__ import annotations

"""
Logging Settings for the Analysis CLI.

A run logs at INFO to the terminal. With `--debug` the level drops to DEBUG,
console lines carry the worker thread name (so interleaved discovery and
usage-scan output can be told apart) and a rotating log file is kept in the
user data directory unless `--log-file` points elsewhere.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from compgraph.infra.fs import get_user_data_dir

DEFAULT_LOG_NAME = "compgraph.log"

# Archived log segments kept next to the active file
LOG_BACKUPS = 1

CONSOLE_FORMAT = "%(levelname)s | %(message)s"
DEBUG_CONSOLE_FORMAT = "%(levelname)s | %(threadName)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_default_log_path(file_name: str = DEFAULT_LOG_NAME) -> str:
    """Resolve the diagnostic log path within the user data directory."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging subsystem.

    Attributes:
        level: Level name; unknown names fall back to INFO.
        console: Write records to stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Log file size that triggers a rollover.
        console_fmt: Format of terminal lines.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None
    max_bytes: int = 1024 * 1024
    console_fmt: str = CONSOLE_FORMAT

    @classmethod
    def for_cli(cls, debug: bool, log_file: Optional[str] = None) -> LoggingConfig:
        """
        Build the settings matching the CLI's verbosity flags.

        Args:
            debug: Value of `--debug`.
            log_file: Value of `--log-file`; in debug mode it defaults to the
                      user data directory.
        """
        if debug:
            return cls(
                level="DEBUG",
                log_file=log_file or get_default_log_path(),
                console_fmt=DEBUG_CONSOLE_FORMAT,
            )
        return cls(level="INFO", log_file=log_file)

    def level_number(self) -> int:
        """Numeric logging level for `level`."""
        value = logging.getLevelName(str(self.level or "").strip().upper())
        return value if isinstance(value, int) else logging.INFO
