from __future__ import annotations

"""
Unit tests for Root Classification and Forest Serialization.

Verifies the used/unused split, the count invariants, the exported node
shape, cycle truncation and single expansion of shared sub-trees.
"""

from typing import Any, Dict, List, Tuple

import pytest

from compgraph.core.analysis.classifier import classify
from compgraph.core.analysis.serializer import (
    serialize_classification,
    serialize_node,
    to_dict,
)
from compgraph.domain.component_models import (
    AnalysisResult,
    ComponentDef,
    Forest,
    Registry,
)
from compgraph.domain.errors import AnalysisWarning, SerializationError


def _forest(defs: Dict[str, str], edges: List[Tuple[str, str]]) -> Forest:
    registry = Registry()
    for name, path in defs.items():
        registry.register(ComponentDef(name, path))
    registry.freeze()
    forest = Forest(registry)
    for parent, child in edges:
        forest.add_edge(parent, child)
    return forest


# -----------------------------------------------------------------------------
# CLASSIFICATION
# -----------------------------------------------------------------------------

def test_single_root_with_children_is_used() -> None:
    forest = _forest(
        {"App": "App.tsx", "Header": "Header.tsx", "Footer": "Footer.tsx"},
        [("App", "Header"), ("App", "Footer")],
    )
    result = classify(forest)

    assert [n.name for n in result.used] == ["App"]
    assert result.unused == ()
    assert (result.used_count, result.unused_count) == (1, 0)
    assert serialize_classification(result) == {
        "used_count": 1,
        "unused_count": 0,
        "used": [{
            "name": "App",
            "path": "App.tsx",
            "children": [
                {"name": "Header", "path": "Header.tsx"},
                {"name": "Footer", "path": "Footer.tsx"},
            ],
        }],
        "unused": [],
    }


def test_isolated_components_are_unused() -> None:
    forest = _forest({"Banner": "Banner.tsx", "Widget": "Widget.tsx"}, [])
    result = classify(forest)

    assert result.used == ()
    assert [n.name for n in result.unused] == ["Banner", "Widget"]
    assert serialize_classification(result)["unused"] == [
        {"name": "Banner", "path": "Banner.tsx"},
        {"name": "Widget", "path": "Widget.tsx"},
    ]


def test_counts_match_lists_and_partition_roots() -> None:
    forest = _forest(
        {"A": "a.tsx", "B": "b.tsx", "C": "c.tsx", "D": "d.tsx"},
        [("A", "B"), ("B", "C")],
    )
    result = classify(forest)
    names = {n.name for n in result.used} | {n.name for n in result.unused}

    assert result.used_count == len(result.used)
    assert result.unused_count == len(result.unused)
    assert names == {n.name for n in forest.roots()} == {"A", "D"}


def test_pure_cycle_has_no_roots() -> None:
    forest = _forest({"A": "a.tsx", "B": "b.tsx"}, [("A", "B"), ("B", "A")])
    result = classify(forest)
    assert result.used_count == result.unused_count == 0
    assert [n.name for n in forest.unreachable()] == ["A", "B"]


# -----------------------------------------------------------------------------
# SERIALIZATION
# -----------------------------------------------------------------------------

def test_cycle_emits_marker_instead_of_recursing() -> None:
    forest = _forest(
        {"Root": "root.tsx", "A": "a.tsx", "B": "b.tsx"},
        [("Root", "A"), ("A", "B"), ("B", "A")],
    )
    data = serialize_node(forest.nodes["Root"], forest)

    assert data == {
        "name": "Root",
        "path": "root.tsx",
        "children": [{
            "name": "A",
            "path": "a.tsx",
            "children": [{
                "name": "B",
                "path": "b.tsx",
                "children": [{"name": "A", "path": "a.tsx", "cycle": True}],
            }],
        }],
    }


def test_shared_subtree_is_expanded_once() -> None:
    """A -> B -> D and A -> C -> D: D is expanded under B and referenced under C."""
    forest = _forest(
        {"A": "a.tsx", "B": "b.tsx", "C": "c.tsx", "D": "d.tsx", "E": "e.tsx"},
        [("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"), ("D", "E")],
    )
    data = serialize_node(forest.nodes["A"], forest)

    assert data["children"][0]["children"] == [
        {"name": "D", "path": "d.tsx", "children": [{"name": "E", "path": "e.tsx"}]}
    ]
    assert data["children"][1]["children"] == [{"name": "D", "path": "d.tsx", "shared": True}]


def _count_nodes(data: Dict[str, Any]) -> int:
    return 1 + sum(_count_nodes(child) for child in data.get("children", []))


def test_layered_diamonds_serialize_in_linear_size() -> None:
    """Each layer renders both components of the next; output stays proportional to the edges."""
    layers = 18
    defs = {"Root": "root.tsx"}
    edges = [("Root", "L0a"), ("Root", "L0b")]
    for i in range(layers):
        for side in "ab":
            defs[f"L{i}{side}"] = f"l{i}{side}.tsx"
            if i + 1 < layers:
                edges += [(f"L{i}{side}", f"L{i + 1}a"), (f"L{i}{side}", f"L{i + 1}b")]
    forest = _forest(defs, edges)

    data = serialize_node(forest.nodes["Root"], forest)

    assert _count_nodes(data) == len(forest.edges) + 1


def test_visited_set_is_per_top_level_call() -> None:
    """A node shared between two roots is expanded under each of them."""
    forest = _forest({"A": "a.tsx", "B": "b.tsx", "S": "s.tsx"}, [("A", "S"), ("B", "S")])
    result = classify(forest)
    data = serialize_classification(result, forest)

    assert [u["children"] for u in data["used"]] == [
        [{"name": "S", "path": "s.tsx"}],
        [{"name": "S", "path": "s.tsx"}],
    ]


def test_reverse_relation_is_never_exported() -> None:
    forest = _forest({"A": "a.tsx", "B": "b.tsx"}, [("A", "B")])
    data = serialize_node(forest.nodes["A"], forest)
    assert "referenced_by" not in data
    assert "referenced_by" not in data["children"][0]


def test_foreign_node_is_rejected() -> None:
    forest = _forest({"A": "a.tsx"}, [])
    other = _forest({"A": "a.tsx"}, [])
    with pytest.raises(SerializationError):
        serialize_node(other.nodes["A"], forest)


def test_excessive_depth_raises_serialization_error() -> None:
    depth = 5000
    forest = _forest(
        {f"N{i}": f"n{i}.tsx" for i in range(depth)},
        [(f"N{i}", f"N{i + 1}") for i in range(depth - 1)],
    )
    with pytest.raises(SerializationError):
        serialize_node(forest.nodes["N0"])


def test_to_dict_includes_run_metadata() -> None:
    forest = _forest(
        {"App": "App.tsx", "Page": "Page.tsx", "X": "x.tsx", "Y": "y.tsx"},
        [("App", "Page"), ("X", "Y"), ("Y", "X")],
    )
    registry_size = len(forest.nodes)
    result = AnalysisResult(
        classification=classify(forest),
        registry=_registry_of(forest),
        forest=forest,
        unreachable=tuple(forest.unreachable()),
        warnings=(AnalysisWarning("big.tsx", "Skipping large file (size: 2000000 bytes)"),),
        complete=True,
    )
    data = to_dict(result)

    assert data["used_count"] == 1
    assert data["component_count"] == registry_size
    assert [u["name"] for u in data["unreachable"]] == ["X", "Y"]
    assert data["warnings"] == [{"path": "big.tsx", "error": "Skipping large file (size: 2000000 bytes)"}]
    assert data["complete"] is True


def _registry_of(forest: Forest) -> Registry:
    registry = Registry()
    for node in forest.nodes.values():
        registry.register(node.definition)
    registry.freeze()
    return registry
