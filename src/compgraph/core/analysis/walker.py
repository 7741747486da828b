from __future__ import annotations

"""
Concurrent Tree Walker.

Discovery phase of the analysis. Recursively enumerates the project tree
through a Content Provider using a bounded worker pool, extracts component
candidates from recognized source files and populates the Registry once the
counting join has observed every spawned task.
"""

import logging
import os
import queue
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple, Union

from compgraph.core.analysis.concurrency import Deadline, TaskGroup, shutdown_executor
from compgraph.core.analysis.registry_builder import (
    FileDefinitions,
    TraversalKey,
    apply_definitions,
    extract_file_definitions,
)
from compgraph.core.extraction.base import DefinitionExtractor
from compgraph.core.providers.base import ContentProvider
from compgraph.domain.component_models import DirectoryEntry, Registry
from compgraph.domain.constants import (
    DEFAULT_MAX_FILE_SIZE_BYTES,
    DEFAULT_MAX_WORKERS,
    RECOGNIZED_EXTENSIONS,
)
from compgraph.domain.errors import AnalysisTimeoutError, AnalysisWarning, ProviderError

logger = logging.getLogger(__name__)


@dataclass
class WalkReport:
    """
    Outcome of the discovery phase.

    Attributes:
        directories: Directories successfully listed (root included).
        files_scanned: Source files fetched and scanned.
        files_ignored: Files outside the recognized extensions.
        registered: Definitions added to the registry.
        warnings: Recoverable failures in traversal order.
        complete: False if a best-effort run was cut short.
    """
    directories: int = 0
    files_scanned: int = 0
    files_ignored: int = 0
    registered: int = 0
    warnings: List[AnalysisWarning] = field(default_factory=list)
    complete: bool = True


@dataclass(frozen=True)
class _Listed:
    key: TraversalKey
    ignored: int


@dataclass(frozen=True)
class _Warned:
    key: TraversalKey
    warning: AnalysisWarning


_Outcome = Union[_Listed, _Warned, FileDefinitions]


class TreeWalker:
    """
    Bounded-concurrency traversal that feeds the Registry Builder.

    Workers never touch the registry. They push outcomes into a queue that
    the coordinating thread drains after the join and applies in traversal
    order.
    """

    def __init__(
            self,
            provider: ContentProvider,
            extractor: DefinitionExtractor,
            deadline: Deadline,
            *,
            max_workers: int = DEFAULT_MAX_WORKERS,
            extensions: Iterable[str] = RECOGNIZED_EXTENSIONS,
            max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
    ) -> None:
        self.provider = provider
        self.extractor = extractor
        self.deadline = deadline
        self.max_workers = max(1, int(max_workers))
        self.extensions = frozenset(e.lower() for e in extensions)
        self.max_file_size_bytes = max_file_size_bytes
        self._outcomes: "queue.Queue[_Outcome]" = queue.Queue()
        self._group: TaskGroup

    def walk(self, root_path: str, registry: Registry, *, best_effort: bool = False) -> WalkReport:
        """
        Traverse the tree under `root_path` and populate `registry`.

        Raises:
            ProviderError: If the root directory cannot be listed.
            AnalysisTimeoutError: If the deadline expires and best-effort
                                  mode was not requested.
        """
        logger.info(f"Discovery started at '{root_path or '/'}' with {self.max_workers} workers.")
        self.deadline.check("discovery")

        # Root listing failure is fatal and propagates as-is
        root_entries = self.provider.list_directory(root_path, timeout=self.deadline.remaining())

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="TreeWalker")
        self._group = TaskGroup(executor, self.deadline)
        finished = False
        try:
            self._outcomes.put(_Listed(key=(), ignored=self._dispatch(root_entries, ())))
            finished = self._group.join()
        finally:
            shutdown_executor(executor, cancelled=not finished)

        if not finished and not best_effort:
            self.deadline.check("discovery")
            raise AnalysisTimeoutError("Discovery did not complete.")

        report = self._collect(registry)
        report.complete = finished
        if not finished:
            logger.warning("Discovery cut short by the deadline; continuing with partial registry.")
        logger.info(
            f"Discovery finished. Directories: {report.directories}, files scanned: "
            f"{report.files_scanned}, components: {report.registered}, warnings: {len(report.warnings)}"
        )
        return report

    # ------------------------------------------------------------------
    # WORKER SIDE
    # ------------------------------------------------------------------

    def _dispatch(self, entries: List[DirectoryEntry], parent_key: TraversalKey) -> int:
        """Schedule work for each entry of a listing; returns the ignored count."""
        ignored = 0
        for index, entry in enumerate(entries):
            key = parent_key + (index,)
            if entry.is_directory:
                self._group.submit(self._walk_directory, entry, key)
                continue

            _, ext = os.path.splitext(entry.name)
            if ext.lower() not in self.extensions:
                ignored += 1
                continue

            if entry.size_bytes > self.max_file_size_bytes:
                msg = f"Skipping large file (size: {entry.size_bytes} bytes)"
                logger.warning(f"{msg}: {entry.path}")
                self._outcomes.put(_Warned(key, AnalysisWarning(entry.path, msg)))
                continue

            self._group.submit(self._scan_file, entry, key)
        return ignored

    def _walk_directory(self, entry: DirectoryEntry, key: TraversalKey) -> None:
        if self.deadline.cancelled:
            return
        try:
            children = self.provider.list_directory(entry.path, timeout=self.deadline.remaining())
        except ProviderError as e:
            logger.warning(f"Error getting directory contents for {entry.path}: {e}")
            self._outcomes.put(_Warned(key, AnalysisWarning(entry.path, f"Directory skipped: {e}")))
            return
        self._outcomes.put(_Listed(key=key, ignored=self._dispatch(children, key)))

    def _scan_file(self, entry: DirectoryEntry, key: TraversalKey) -> None:
        if self.deadline.cancelled:
            return
        try:
            text = self.provider.get_file_content(entry.path, timeout=self.deadline.remaining())
        except ProviderError as e:
            logger.warning(f"Error getting file contents for {entry.path}: {e}")
            self._outcomes.put(_Warned(key, AnalysisWarning(entry.path, f"File skipped: {e}")))
            return
        self._outcomes.put(extract_file_definitions(key, entry.path, text, self.extractor))

    # ------------------------------------------------------------------
    # COORDINATOR SIDE
    # ------------------------------------------------------------------

    def _collect(self, registry: Registry) -> WalkReport:
        report = WalkReport()
        discovered: List[FileDefinitions] = []
        warned: List[Tuple[TraversalKey, AnalysisWarning]] = []

        while True:
            try:
                outcome = self._outcomes.get_nowait()
            except queue.Empty:
                break
            if isinstance(outcome, FileDefinitions):
                discovered.append(outcome)
            elif isinstance(outcome, _Warned):
                warned.append((outcome.key, outcome.warning))
            else:
                report.directories += 1
                report.files_ignored += outcome.ignored

        report.files_scanned = len(discovered)
        report.registered = apply_definitions(registry, discovered)
        report.warnings = [w for _, w in sorted(warned, key=lambda kw: kw[0])]
        return report


def walk_tree(
        provider: ContentProvider,
        root_path: str,
        registry: Registry,
        extractor: DefinitionExtractor,
        deadline: Deadline,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        extensions: Iterable[str] = RECOGNIZED_EXTENSIONS,
        max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
        best_effort: bool = False,
) -> WalkReport:
    """Functional facade over TreeWalker for a single discovery run."""
    walker = TreeWalker(
        provider,
        extractor,
        deadline,
        max_workers=max_workers,
        extensions=extensions,
        max_file_size_bytes=max_file_size_bytes,
    )
    return walker.walk(root_path, registry, best_effort=best_effort)
