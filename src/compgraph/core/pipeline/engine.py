from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the analysis workflow:
1. Validates configuration and repository identifiers.
2. Discovers component definitions (phase 1) and freezes the registry.
3. Links components through their references (phase 2).
4. Classifies the forest roots as used or unused (phase 3).

All phases share one deadline. Without best-effort mode an expired deadline
fails the run with AnalysisTimeoutError and no partial result is returned.
"""

import logging
import os
import re
import threading
import time
from typing import Any, Dict, Optional, Tuple

import requests

from compgraph.core.analysis.classifier import classify
from compgraph.core.analysis.concurrency import Deadline
from compgraph.core.analysis.usage_graph import UsageGraphReport, build_usage_graph
from compgraph.core.analysis.walker import walk_tree
from compgraph.core.extraction import (
    DefinitionExtractor,
    ExportDefinitionExtractor,
    JsxTagReferenceExtractor,
    ReferenceExtractor,
)
from compgraph.core.pipeline.validator import validate_config
from compgraph.core.providers.base import ContentProvider
from compgraph.domain.component_models import (
    AnalysisResult,
    ClassificationResult,
    Forest,
    Registry,
)
from compgraph.domain.errors import InputError
from compgraph.infra.network import GitHubContentProvider

logger = logging.getLogger(__name__)

_OWNER_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$")
_PROJECT_RE = re.compile(r"^[A-Za-z0-9._-]{1,100}$")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_analysis(
        provider: ContentProvider,
        root_path: str = "",
        config: Optional[Dict[str, Any]] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
        definition_extractor: Optional[DefinitionExtractor] = None,
        reference_extractor: Optional[ReferenceExtractor] = None,
) -> AnalysisResult:
    """
    Run the three analysis phases against any Content Provider.

    Args:
        provider: Source of directory listings and file text.
        root_path: Project-relative directory to start from ('' = root).
        config: Raw configuration dictionary (validated here).
        cancel_event: Optional event; setting it cancels the run.
        definition_extractor: Override for component definition detection.
        reference_extractor: Override for component reference detection.

    Returns:
        AnalysisResult: Classification plus registry, forest and warnings.

    Raises:
        ProviderError: If the root directory cannot be listed.
        AnalysisTimeoutError: If the deadline expires (or the run is
                              cancelled) outside best-effort mode.
    """
    cfg, cfg_warnings = validate_config(config, strict=False)
    for warning in cfg_warnings:
        logger.warning(f"Configuration Warning: {warning}")

    best_effort = bool(cfg["best_effort"])
    max_workers = int(cfg["max_workers"])
    deadline = Deadline(cfg["timeout_seconds"], cancel_event)
    started = time.monotonic()

    # Phase 1: discovery
    registry = Registry()
    walk = walk_tree(
        provider,
        root_path,
        registry,
        definition_extractor or ExportDefinitionExtractor(),
        deadline,
        max_workers=max_workers,
        extensions=cfg["extensions"],
        max_file_size_bytes=int(cfg["max_file_size_bytes"]),
        best_effort=best_effort,
    )

    # Barrier: the registry is read-only from here on
    registry.freeze()

    # Phase 2: usage graph
    if best_effort and deadline.cancelled:
        logger.warning("No time left for the usage scan; components are reported without children.")
        usage = UsageGraphReport(forest=Forest(registry), complete=False)
    else:
        usage = build_usage_graph(
            provider,
            registry,
            reference_extractor or JsxTagReferenceExtractor(),
            deadline,
            max_workers=max_workers,
            best_effort=best_effort,
        )

    # Phase 3: classification
    classification = classify(usage.forest)
    unreachable = tuple(usage.forest.unreachable())
    if unreachable:
        logger.warning(
            f"{len(unreachable)} component(s) only reachable through reference cycles: "
            f"{', '.join(n.name for n in unreachable)}"
        )

    result = AnalysisResult(
        classification=classification,
        registry=registry,
        forest=usage.forest,
        unreachable=unreachable,
        warnings=tuple(walk.warnings) + tuple(usage.warnings),
        complete=walk.complete and usage.complete,
    )
    logger.info(f"Analysis completed in {time.monotonic() - started:.2f}s.")
    return result


def analyze_repository(
        owner: str,
        project: str,
        config: Optional[Dict[str, Any]] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
        session: Optional[requests.Session] = None,
) -> AnalysisResult:
    """
    Analyze a GitHub repository and return the full result.

    Raises:
        InputError: Invalid identifiers or missing credentials.
        ProviderError: Root listing unavailable.
        AnalysisTimeoutError: Deadline expired.
    """
    owner, project = validate_identifiers(owner, project)
    cfg, _ = validate_config(config, strict=False)
    token = resolve_token(cfg["token_env_var"])

    provider = GitHubContentProvider(
        owner,
        project,
        token,
        api_url=cfg["api_url"],
        ref=cfg["ref"],
        pool_size=int(cfg["max_workers"]),
        session=session,
    )
    logger.info(f"Analyzing repository {owner}/{project}" + (f" at {cfg['ref']}" if cfg["ref"] else ""))
    try:
        return run_analysis(provider, "", cfg, cancel_event=cancel_event)
    finally:
        provider.close()


def analyze(
        owner: str,
        project: str,
        config: Optional[Dict[str, Any]] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
) -> ClassificationResult:
    """Classify the root components of `owner/project` as used or unused."""
    return analyze_repository(owner, project, config, cancel_event=cancel_event).classification


# -----------------------------------------------------------------------------
# INPUT VALIDATION
# -----------------------------------------------------------------------------

def parse_repository(repository: str) -> Tuple[str, str]:
    """
    Split an `owner/project` repository argument.

    Raises:
        InputError: If the value is not in owner/project form.
    """
    parts = (repository or "").strip().strip("/").split("/")
    if len(parts) != 2:
        raise InputError(f"Invalid repository format '{repository}'. Please use 'owner/project'.")
    return validate_identifiers(parts[0], parts[1])


def validate_identifiers(owner: str, project: str) -> Tuple[str, str]:
    """Check owner and project names; returns them stripped."""
    owner = (owner or "").strip()
    project = (project or "").strip()
    if not owner or not project:
        raise InputError("Both an owner (or namespace) and a project name are required.")
    if not _OWNER_RE.match(owner):
        raise InputError(f"Invalid owner '{owner}'.")
    if not _PROJECT_RE.match(project) or project in (".", ".."):
        raise InputError(f"Invalid project name '{project}'.")
    return owner, project


def resolve_token(env_var: str) -> str:
    """Read the provider token from the environment."""
    token = os.environ.get(env_var, "").strip() if env_var else ""
    if not token:
        raise InputError(f"{env_var or 'Token'} environment variable not set.")
    return token
