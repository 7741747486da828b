from __future__ import annotations

"""
Root Classification.

Splits the roots of a completed forest into components that compose at
least one other known component (used) and components that compose
nothing (unused).
"""

import logging

from compgraph.domain.component_models import ClassificationResult, Forest

logger = logging.getLogger(__name__)


def classify(forest: Forest) -> ClassificationResult:
    """
    Classify the roots of `forest`.

    Roots are derived from the complete edge set, so this must only run
    after the usage phase has inserted every edge.
    """
    roots = forest.roots()
    used = tuple(node for node in roots if node.children)
    unused = tuple(node for node in roots if not node.children)

    logger.info(f"Root components: {len(roots)} (used: {len(used)}, unused: {len(unused)})")
    return ClassificationResult(
        used=used,
        unused=unused,
        used_count=len(used),
        unused_count=len(unused),
    )
