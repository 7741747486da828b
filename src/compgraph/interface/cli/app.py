from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging initialization, configuration
resolution (defaults or persisted session, then CLI overrides), analysis
execution against GitHub or a local checkout, and result rendering.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional

from compgraph.core.analysis.serializer import serialize_node, to_dict
from compgraph.core.pipeline.engine import analyze_repository, parse_repository, run_analysis
from compgraph.core.pipeline.validator import validate_config
from compgraph.core.providers.local import LocalContentProvider
from compgraph.domain.component_models import AnalysisResult
from compgraph.domain.config import get_default_config, load_config, save_config
from compgraph.domain.errors import (
    AnalysisTimeoutError,
    InputError,
    ProviderError,
    SerializationError,
)
from compgraph.infra.fs import normalize_path, write_warning_report
from compgraph.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_logger,
)
from compgraph.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT_ERROR = 2
EXIT_PROVIDER_ERROR = 3
EXIT_TIMEOUT = 4
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    log_file = normalize_path(args.log_file, os.getcwd()) if args.log_file else None
    configure_logging(LoggingConfig.for_cli(args.debug, log_file))
    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))

    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.save_config:
        save_config(clean_conf)

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    local_path = args.local_path or ("" if args.repository else clean_conf["local_path"])

    try:
        if local_path:
            result = _run_local(local_path, clean_conf)
        elif args.repository:
            owner, project = parse_repository(args.repository)
            result = analyze_repository(owner, project, clean_conf)
        else:
            raise InputError("Provide a repository as 'owner/project' or a checkout with --local PATH.")
    except InputError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except ProviderError as e:
        logger.error(f"Error processing repository: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_PROVIDER_ERROR
    except AnalysisTimeoutError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_TIMEOUT
    except KeyboardInterrupt:
        logger.warning("Operation interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    if args.warnings_file and result.warnings:
        report_path = write_warning_report(normalize_path(args.warnings_file, os.getcwd()), result.warnings)
        if report_path:
            logger.info(f"Warnings written to {report_path}")

    try:
        if args.json_output:
            print(json.dumps(to_dict(result), ensure_ascii=False, indent=2))
        else:
            _print_human_summary(result)
    except SerializationError as e:
        logger.critical(f"Internal error while exporting results: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_OK

# -----------------------------------------------------------------------------
# EXECUTION HELPERS
# -----------------------------------------------------------------------------

def _run_local(local_path: str, cfg: Dict[str, Any]) -> AnalysisResult:
    root = normalize_path(local_path, os.getcwd())
    if not os.path.isdir(root):
        raise InputError(f"Local path does not exist or is not a directory: {root}")
    logger.info(f"Analyzing local checkout: {root}")
    return run_analysis(LocalContentProvider(root), "", cfg)


def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge known, non-None override values into the base configuration.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k in get_default_config():
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: AnalysisResult) -> None:
    """Render the classification as indented component trees plus counts."""
    classification = result.classification

    for title, nodes in (("USED ROOT COMPONENTS", classification.used),
                         ("UNUSED ROOT COMPONENTS", classification.unused),
                         ("UNREACHABLE (REFERENCE CYCLES)", result.unreachable)):
        if not nodes:
            continue
        print(title)
        print("-" * 50)
        for node in nodes:
            _print_tree(serialize_node(node, result.forest), 0)
        print()

    print(f"Components found: {len(result.registry)}")
    print(f"Used roots: {classification.used_count}")
    print(f"Unused roots: {classification.unused_count}")
    print(f"Root Components: {classification.used_count + classification.unused_count}")

    if result.warnings:
        print(f"Warnings: {len(result.warnings)}")
        for w in result.warnings:
            print(f"  - {w.path}: {w.error}")

    if not result.complete:
        print("NOTE: partial result (deadline expired in best-effort mode).")


def _print_tree(data: Dict[str, Any], depth: int) -> None:
    marker = " [cycle]" if data.get("cycle") else (" [shown above]" if data.get("shared") else "")
    print(f"{'  ' * depth}- {data['name']} ({data['path']}){marker}")
    for child in data.get("children", []):
        _print_tree(child, depth + 1)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
