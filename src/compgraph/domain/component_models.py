from __future__ import annotations

"""
Component Graph Domain Models.

Defines the data structures that flow between the analysis phases:
directory entries served by a Content Provider, component definitions, the
name-keyed registry, graph nodes and the forest of composition edges.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from compgraph.domain.errors import AnalysisWarning

# -----------------------------------------------------------------------------
# PROVIDER MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DirectoryEntry:
    """
    Single item of a directory listing.

    Attributes:
        name: Base name of the entry.
        path: Project-relative path, '/' separated.
        is_directory: True for directories, False for files.
        size_bytes: Size reported by the provider (0 for directories).
    """
    name: str
    path: str
    is_directory: bool
    size_bytes: int = 0


# -----------------------------------------------------------------------------
# REGISTRY MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ComponentDef:
    """A component definition. Identity is the component name."""
    name: str
    path: str


class Registry:
    """
    Name-keyed mapping of discovered component definitions.

    Writes are serialized by an internal lock and rejected once the registry
    has been frozen at the end of the discovery phase. The first definition
    registered for a name is kept.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: Dict[str, ComponentDef] = {}
        self._frozen = False

    def register(self, definition: ComponentDef) -> bool:
        """
        Insert a definition unless its name is already known.

        Returns:
            bool: True if the definition was stored.

        Raises:
            RuntimeError: If the registry is frozen.
        """
        with self._lock:
            if self._frozen:
                raise RuntimeError("Registry is frozen; no further definitions accepted.")
            if definition.name in self._items:
                return False
            self._items[definition.name] = definition
            return True

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Optional[ComponentDef]:
        return self._items.get(name)

    def names(self) -> List[str]:
        """Registered names in stable (sorted) order."""
        return sorted(self._items)

    def definitions(self) -> List[ComponentDef]:
        """Registered definitions in stable (sorted by name) order."""
        return [self._items[name] for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ComponentDef]:
        return iter(self.definitions())


# -----------------------------------------------------------------------------
# GRAPH MODELS
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class Node:
    """
    Graph vertex wrapping one component definition.

    A node is shared by every parent that references it. `referenced_by` is a
    lookup-only back-reference and is never exported.
    """
    definition: ComponentDef
    children: List["Node"] = field(default_factory=list)
    referenced_by: Set[str] = field(default_factory=set)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def path(self) -> str:
        return self.definition.path

    def __repr__(self) -> str:
        return f"Node({self.name!r}, children={[c.name for c in self.children]})"


class Forest:
    """
    Composition graph over a frozen registry.

    Holds one Node per registered component and the de-duplicated edge set.
    Not thread-safe: edges are inserted by a single coordinator.
    """

    def __init__(self, registry: Registry) -> None:
        self.nodes: Dict[str, Node] = {d.name: Node(d) for d in registry.definitions()}
        self._edges: Set[Tuple[str, str]] = set()

    def add_edge(self, parent: str, child: str) -> bool:
        """
        Record `parent -> child`.

        Self references, unknown names and duplicates are ignored.

        Returns:
            bool: True if a new edge was inserted.
        """
        if parent == child or (parent, child) in self._edges:
            return False
        parent_node = self.nodes.get(parent)
        child_node = self.nodes.get(child)
        if parent_node is None or child_node is None:
            return False

        self._edges.add((parent, child))
        parent_node.children.append(child_node)
        child_node.referenced_by.add(parent)
        return True

    @property
    def edges(self) -> Set[Tuple[str, str]]:
        return set(self._edges)

    def roots(self) -> List[Node]:
        """Nodes with zero incoming edges, ordered by name."""
        return [self.nodes[n] for n in sorted(self.nodes) if not self.nodes[n].referenced_by]

    def reachable_from_roots(self) -> Set[str]:
        seen: Set[str] = set()
        stack = [node for node in self.roots()]
        while stack:
            node = stack.pop()
            if node.name in seen:
                continue
            seen.add(node.name)
            stack.extend(node.children)
        return seen

    def unreachable(self) -> List[Node]:
        """Non-root nodes that no root reaches (members of reference cycles)."""
        reached = self.reachable_from_roots()
        return [self.nodes[n] for n in sorted(self.nodes) if n not in reached]

    def __len__(self) -> int:
        return len(self.nodes)


# -----------------------------------------------------------------------------
# RESULT MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ClassificationResult:
    """
    Used/unused partition of the forest roots.

    Attributes:
        used: Roots composing at least one other component, ordered by name.
        unused: Roots composing nothing, ordered by name.
        used_count: len(used).
        unused_count: len(unused).
    """
    used: Tuple[Node, ...]
    unused: Tuple[Node, ...]
    used_count: int
    unused_count: int


@dataclass(frozen=True)
class AnalysisResult:
    """
    Full outcome of an analysis run.

    Attributes:
        classification: Used/unused roots.
        registry: Frozen registry produced by discovery.
        forest: Composition graph produced by the usage pass.
        unreachable: Nodes that are neither roots nor reachable from one.
        warnings: Recoverable failures, in the order they were aggregated.
        complete: False only for best-effort runs cut short by the deadline.
    """
    classification: ClassificationResult
    registry: Registry
    forest: Forest
    unreachable: Tuple[Node, ...] = ()
    warnings: Tuple[AnalysisWarning, ...] = ()
    complete: bool = True
