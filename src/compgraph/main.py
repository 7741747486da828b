from __future__ import annotations

"""
Main Entry Point.

Routes execution to the CLI controller and keeps a last-resort handler
that logs unexpected crashes before exiting.
"""

import logging
import sys
import traceback
from typing import Any

from compgraph.interface.cli.app import main as cli_main


def global_exception_handler(exctype: type, value: BaseException, tb: Any) -> None:
    """Log an unhandled exception with its stack trace and exit with status 1."""
    stack_trace = "".join(traceback.format_exception(exctype, value, tb))
    logging.getLogger("compgraph.supervisor").critical(f"FATAL EXCEPTION DETECTED: {value}\n{stack_trace}")
    print("CRITICAL ERROR (COMPGRAPH CLI)", file=sys.stderr)
    print(stack_trace, file=sys.stderr)
    sys.exit(1)


def main() -> int:
    sys.excepthook = global_exception_handler
    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
