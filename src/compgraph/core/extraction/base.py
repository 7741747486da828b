from __future__ import annotations

"""
Base Definitions for Extraction Strategies.

Provides the narrow interfaces through which the graph builders obtain
component definitions and component references from raw source text.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class DefinitionCandidate:
    """
    Component name proposed by a definition extractor.

    Attributes:
        name: Candidate component name.
        exported: False for fallback candidates, which only register when no
                  exported definition claims the same name.
    """
    name: str
    exported: bool = True


class DefinitionExtractor(ABC):
    """
    Abstract strategy finding component definitions in a source file.
    """

    @abstractmethod
    def extract(self, text: str) -> List[DefinitionCandidate]:
        """
        Return the candidates of a file, at most one per name, in order.

        Must never raise on malformed text; such text yields no candidates.
        """


class ReferenceExtractor(ABC):
    """
    Abstract strategy finding references to other components in a source file.
    """

    @abstractmethod
    def extract(self, text: str) -> List[str]:
        """Return referenced names, de-duplicated, in order of first occurrence."""
