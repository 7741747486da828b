from __future__ import annotations

"""
Forest Serialization.

Converts nodes and results into plain JSON-compatible dictionaries. Each
node emits its own fields and its children; the reverse relation is never
exported. Every top-level call keeps one visited set, so each node is
expanded at most once per call: re-entering a node on the current path emits
a `cycle` marker, reaching an already expanded node through another parent
emits a `shared` marker. Output size is therefore linear in the number of
edges.
"""

from typing import Any, Dict, List, Optional, Set

from compgraph.domain.component_models import (
    AnalysisResult,
    ClassificationResult,
    Forest,
    Node,
)
from compgraph.domain.errors import SerializationError


def serialize_node(node: Node, forest: Optional[Forest] = None) -> Dict[str, Any]:
    """
    Serialize a node and its descendants.

    Args:
        node: Top-level node.
        forest: When given, every emitted node is checked to belong to it.

    Raises:
        SerializationError: If a node is foreign to `forest` or the structure
                            is too deep to export.
    """
    try:
        return _serialize(node, set(), set(), forest)
    except RecursionError as e:
        raise SerializationError(f"Component tree under '{node.name}' is too deep to serialize.") from e


def serialize_classification(
        result: ClassificationResult,
        forest: Optional[Forest] = None,
) -> Dict[str, Any]:
    """Serialize a classification in the `used_count/unused_count/used/unused` shape."""
    return {
        "used_count": result.used_count,
        "unused_count": result.unused_count,
        "used": [serialize_node(n, forest) for n in result.used],
        "unused": [serialize_node(n, forest) for n in result.unused],
    }


def to_dict(result: AnalysisResult) -> Dict[str, Any]:
    """Serialize a full analysis run, including warnings and unreachable components."""
    data = serialize_classification(result.classification, result.forest)
    data["unreachable"] = [serialize_node(n, result.forest) for n in result.unreachable]
    data["component_count"] = len(result.registry)
    data["complete"] = result.complete
    data["warnings"] = [{"path": w.path, "error": w.error} for w in result.warnings]
    return data


def _serialize(node: Node, on_path: Set[str], visited: Set[str], forest: Optional[Forest]) -> Dict[str, Any]:
    if forest is not None and forest.nodes.get(node.name) is not node:
        raise SerializationError(f"Node '{node.name}' does not belong to the forest being exported.")

    out: Dict[str, Any] = {"name": node.name, "path": node.path}
    if node.name in on_path:
        out["cycle"] = True
        return out
    if node.name in visited:
        out["shared"] = True
        return out

    visited.add(node.name)
    on_path.add(node.name)
    children: List[Dict[str, Any]] = [_serialize(child, on_path, visited, forest) for child in node.children]
    on_path.discard(node.name)

    if children:
        out["children"] = children
    return out
