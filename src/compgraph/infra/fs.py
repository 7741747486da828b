from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path resolution for persistent application data,
path normalization for user-supplied locations, and the writer for the
warning report produced at the end of an analysis.
"""

import logging
import os
from typing import Iterable, Optional, Tuple

from compgraph.domain.errors import AnalysisWarning

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "CompGraph"
UNIX_APP_DIR_NAME = ".compgraph"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/CompGraph
    - Linux/Mac: ~/.compgraph

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        logger.debug(f"Could not create data directory {path}")

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))


def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


# -----------------------------------------------------------------------------
# REPORTING API
# -----------------------------------------------------------------------------

def write_warning_report(output_path: str, warnings: Iterable[AnalysisWarning]) -> str:
    """
    Persist the aggregated analysis warnings to a text report.

    Args:
        output_path: Target filesystem path for the report.
        warnings: Warnings collected during the run.

    Returns:
        str: The path of the written report, or an empty string if nothing
             was written.
    """
    items = list(warnings)
    if not items:
        return ""

    ok, err = safe_mkdir(os.path.dirname(os.path.abspath(output_path)))
    if not ok:
        logger.error(f"Failed to prepare report directory for '{output_path}': {err}")
        return ""

    try:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write("ANALYSIS WARNINGS REPORT:\n")
            f.write("=" * 80 + "\n")
            for item in items:
                f.write(f"PATH: {item.path}\n")
                f.write(f"WARNING: {item.error}\n")
                f.write("-" * 80 + "\n")
    except OSError as e:
        logger.error(f"Failed to persist warning report to '{output_path}': {e}")
        return ""

    return output_path
