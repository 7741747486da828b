from __future__ import annotations

from .base import DefinitionCandidate, DefinitionExtractor, ReferenceExtractor
from .patterns import ExportDefinitionExtractor, JsxTagReferenceExtractor

__all__ = [
    "DefinitionCandidate",
    "DefinitionExtractor",
    "ReferenceExtractor",
    "ExportDefinitionExtractor",
    "JsxTagReferenceExtractor",
]
