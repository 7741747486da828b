from __future__ import annotations

"""
Usage Graph Builder.

Second analysis phase. Re-reads the file behind every registered component,
finds references to other registered components and links them into a
Forest. Fetching and scanning run on a bounded pool; edge insertion happens
only on the coordinating thread.
"""

import logging
import queue
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from compgraph.core.analysis.concurrency import Deadline, TaskGroup, shutdown_executor
from compgraph.core.extraction.base import ReferenceExtractor
from compgraph.core.providers.base import ContentProvider
from compgraph.domain.component_models import Forest, Registry
from compgraph.domain.constants import DEFAULT_MAX_WORKERS
from compgraph.domain.errors import AnalysisTimeoutError, AnalysisWarning, ProviderError

logger = logging.getLogger(__name__)


@dataclass
class UsageGraphReport:
    """
    Outcome of the usage phase.

    Attributes:
        forest: Composition graph over the registry.
        files_scanned: Distinct files read.
        edges: Number of edges inserted.
        warnings: Files whose components were degraded to having no children.
        complete: False if a best-effort run was cut short; the forest then
                  holds no edges.
    """
    forest: Forest
    files_scanned: int = 0
    edges: int = 0
    warnings: List[AnalysisWarning] = field(default_factory=list)
    complete: bool = True


def build_usage_graph(
        provider: ContentProvider,
        registry: Registry,
        extractor: ReferenceExtractor,
        deadline: Deadline,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        best_effort: bool = False,
) -> UsageGraphReport:
    """
    Link registered components by the references found in their files.

    Components defined in the same file share one fetch and one scan.

    Args:
        provider: Content source.
        registry: Frozen registry from the discovery phase.
        extractor: Reference detection strategy.
        deadline: Operation deadline shared with the discovery phase.
        max_workers: Pool size.
        best_effort: On expiry or cancellation, return an edgeless forest marked
                     incomplete instead of raising. Partially scanned
                     references are discarded, never merged.

    Returns:
        UsageGraphReport: Forest plus phase statistics.

    Raises:
        RuntimeError: If the registry has not been frozen.
        AnalysisTimeoutError: On expiry or cancellation without best-effort mode.
    """
    if not registry.frozen:
        raise RuntimeError("Usage graph requires a frozen registry.")

    definers_by_path: Dict[str, List[str]] = defaultdict(list)
    for definition in registry.definitions():
        definers_by_path[definition.path].append(definition.name)
    paths = sorted(definers_by_path)

    logger.info(f"Usage scan started for {len(registry)} components across {len(paths)} files.")
    deadline.check("usage scan")

    outcomes: "queue.Queue[Tuple[str, List[str], str]]" = queue.Queue()

    def scan(path: str) -> None:
        if deadline.cancelled:
            return
        try:
            text = provider.get_file_content(path, timeout=deadline.remaining())
        except ProviderError as e:
            logger.warning(f"Error reading file {path}: {e}")
            outcomes.put((path, [], f"References unavailable, components kept without children: {e}"))
            return
        outcomes.put((path, extractor.extract(text), ""))

    executor = ThreadPoolExecutor(max_workers=max(1, int(max_workers)), thread_name_prefix="UsageScanner")
    group = TaskGroup(executor, deadline)
    finished = False
    try:
        for path in paths:
            group.submit(scan, path)
        finished = group.join()
    finally:
        shutdown_executor(executor, cancelled=not finished)

    if not finished:
        if not best_effort:
            deadline.check("usage scan")
            raise AnalysisTimeoutError("Usage scan did not complete.")
        # Partial references are dropped
        logger.warning("Usage scan aborted; components are reported without children.")
        return UsageGraphReport(forest=Forest(registry), complete=False)

    # Single writer: only this thread mutates the forest
    scanned: Dict[str, Tuple[List[str], str]] = {}
    while True:
        try:
            path, refs, error = outcomes.get_nowait()
        except queue.Empty:
            break
        scanned[path] = (refs, error)

    report = UsageGraphReport(forest=Forest(registry))
    for path in paths:
        if path not in scanned:
            continue
        refs, error = scanned[path]
        report.files_scanned += 1
        if error:
            report.warnings.append(AnalysisWarning(path, error))
            continue
        for definer in definers_by_path[path]:
            for ref in refs:
                if ref in registry and report.forest.add_edge(definer, ref):
                    report.edges += 1

    logger.info(
        f"Usage scan finished. Files: {report.files_scanned}, edges: {report.edges}, "
        f"warnings: {len(report.warnings)}"
    )
    return report
