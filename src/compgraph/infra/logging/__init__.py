from __future__ import annotations

from .config import LoggingConfig, get_default_log_path
from .core import (
    configure_logging,
    get_logger,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "configure_logging",
    "get_logger",
    "get_default_log_path",
    "shutdown_logging",
]
