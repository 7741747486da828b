from __future__ import annotations

"""
Component Registry Builder.

Turns file text into tagged definition candidates (worker side) and applies
the collected candidates to the shared Registry (coordinator side). Every
candidate carries the pre-order traversal key of its file, so the outcome of
a name collision is decided by tree position and never by which worker
finished first.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

from compgraph.core.extraction.base import DefinitionCandidate, DefinitionExtractor
from compgraph.domain.component_models import ComponentDef, Registry

logger = logging.getLogger(__name__)

TraversalKey = Tuple[int, ...]


@dataclass(frozen=True)
class FileDefinitions:
    """
    Candidates found in one file.

    Attributes:
        key: Pre-order traversal key of the file (tuple of entry indices).
        path: Project-relative file path.
        candidates: Candidates in extraction order.
    """
    key: TraversalKey
    path: str
    candidates: Tuple[DefinitionCandidate, ...]


def extract_file_definitions(
        key: TraversalKey,
        path: str,
        text: str,
        extractor: DefinitionExtractor,
) -> FileDefinitions:
    """Run the definition extractor over one file. Never raises on bad text."""
    return FileDefinitions(key=key, path=path, candidates=tuple(extractor.extract(text)))


def apply_definitions(registry: Registry, discovered: Iterable[FileDefinitions]) -> int:
    """
    Register candidates in traversal order.

    Exported candidates are applied first across the whole tree; fallback
    candidates are applied afterwards and only claim names nobody exported.
    Within each pass the first file in pre-order wins.

    Args:
        registry: Target registry, not yet frozen.
        discovered: Per-file candidates, in any order.

    Returns:
        int: Number of definitions registered.
    """
    ordered = sorted(discovered, key=lambda d: d.key)
    registered = 0

    for exported_pass in (True, False):
        for item in ordered:
            for candidate in item.candidates:
                if candidate.exported is not exported_pass:
                    continue
                definition = ComponentDef(name=candidate.name, path=item.path)
                if registry.register(definition):
                    registered += 1
                    logger.debug(f"Found component: {candidate.name} in {item.path}")
                else:
                    kept = registry.get(candidate.name)
                    if kept is not None and kept.path != item.path:
                        logger.info(
                            f"Duplicate component '{candidate.name}' in {item.path} ignored; "
                            f"keeping definition from {kept.path}"
                        )

    return registered
