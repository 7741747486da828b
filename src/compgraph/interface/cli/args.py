from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates raw argparse
namespaces into configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

from compgraph.domain.constants import APP_VERSION

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the CompGraph CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="compgraph",
        description=(
            "Map which UI components compose which in a JS/TS project and "
            "report top-level components as used or unused."
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    # --- Target Selection ---
    p.add_argument(
        "repository",
        nargs="?",
        default=None,
        help="GitHub repository in the format 'owner/project'.",
    )
    p.add_argument(
        "--local",
        dest="local_path",
        default=None,
        help="Analyze a local checkout instead of a GitHub repository.",
    )
    p.add_argument(
        "--ref",
        dest="ref",
        default=None,
        help="Branch, tag or commit to read (GitHub only).",
    )

    # --- Runtime Constraints ---
    p.add_argument(
        "--workers",
        dest="max_workers",
        type=int,
        default=None,
        help="Maximum number of concurrent fetches.",
    )
    p.add_argument(
        "--timeout",
        dest="timeout_seconds",
        type=float,
        default=None,
        help="Deadline for the whole analysis, in seconds.",
    )
    p.add_argument(
        "--max-file-size",
        dest="max_file_size_bytes",
        type=int,
        default=None,
        help="Skip files larger than this many bytes.",
    )
    p.add_argument(
        "--ext",
        dest="extensions",
        default=None,
        help="Comma-separated source extensions to scan.",
    )
    p.add_argument(
        "--best-effort",
        action="store_true",
        help="On deadline expiry return the partial result instead of failing.",
    )

    # --- Reporting ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the result as JSON.",
    )
    p.add_argument(
        "--warnings-file",
        dest="warnings_file",
        default=None,
        help="Write the collected warnings to this file.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved session and start from default settings.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective settings as the new session.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG and keep a log file in the user data directory.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        metavar="PATH",
        help="Also write log records to this rotating file.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "local_path": args.local_path,
        "ref": args.ref,
        "max_workers": args.max_workers,
        "timeout_seconds": args.timeout_seconds,
        "max_file_size_bytes": args.max_file_size_bytes,
    }

    if args.extensions:
        overrides["extensions"] = _split_csv(args.extensions)
    if args.best_effort:
        overrides["best_effort"] = True

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of sanitized strings."""
    if value is None:
        return None
    return [x.strip() for x in value.split(",") if x.strip()]
