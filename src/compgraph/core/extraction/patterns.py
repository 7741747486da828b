from __future__ import annotations

"""
Pattern-Based Extraction Strategies.

Regex implementations of the extraction interfaces. Detection works on raw
text, so commented-out code and string literals are matched as well; this
loss of precision is accepted in exchange for not parsing the language.
"""

import re
from typing import List, Set

from compgraph.core.extraction.base import (
    DefinitionCandidate,
    DefinitionExtractor,
    ReferenceExtractor,
)

# Rule 1: `export [default] function|class|const Name` at line start
_EXPORT_DECL_RE = re.compile(
    r"^export\s+(?:default\s+)?(?:function|class|const)\s+([A-Za-z_$][\w$]*)",
    re.MULTILINE,
)

# Rule 2: `export const Name = (` or `export const Name = arg =>`
_EXPORT_ARROW_RE = re.compile(
    r"export\s+const\s+([A-Za-z_$][\w$]*)\s*=\s*(?:\(|[A-Za-z_$][\w$]*\s*=>)"
)

# Rule 3: top-level `function Name` at line start
_FUNCTION_DECL_RE = re.compile(r"^function\s+([A-Za-z_$][\w$]*)", re.MULTILINE)

# `<Name` followed by whitespace, '/' or '>'
_JSX_TAG_RE = re.compile(r"<([A-Z][\w$]*)(?=[\s/>])")


class ExportDefinitionExtractor(DefinitionExtractor):
    """
    Names components after their exported symbol.

    Exported declarations are matched first, then exported arrow/function
    expression constants, then plain top-level functions as fallback
    candidates. The first rule matching a name wins.
    """

    def extract(self, text: str) -> List[DefinitionCandidate]:
        if not text:
            return []

        seen: Set[str] = set()
        out: List[DefinitionCandidate] = []

        for rx, exported in ((_EXPORT_DECL_RE, True), (_EXPORT_ARROW_RE, True), (_FUNCTION_DECL_RE, False)):
            for match in rx.finditer(text):
                name = match.group(1)
                if name in seen:
                    continue
                seen.add(name)
                out.append(DefinitionCandidate(name=name, exported=exported))
        return out


class JsxTagReferenceExtractor(ReferenceExtractor):
    """Finds capitalized JSX tag openings such as `<Card />` or `<Layout>`."""

    def extract(self, text: str) -> List[str]:
        if not text:
            return []

        seen: Set[str] = set()
        out: List[str] = []
        for match in _JSX_TAG_RE.finditer(text):
            name = match.group(1)
            if name not in seen:
                seen.add(name)
                out.append(name)
        return out
