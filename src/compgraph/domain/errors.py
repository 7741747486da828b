from __future__ import annotations

"""
Error Taxonomy.

Defines the exception hierarchy raised by the analysis engine and the
immutable warning record used to aggregate recoverable failures.
"""

from dataclasses import dataclass
from enum import Enum


class CompGraphError(Exception):
    """Base class for every error raised by the analysis engine."""


class InputError(CompGraphError):
    """Invalid repository specification or missing provider credentials."""


class ProviderErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"


class ProviderError(CompGraphError):
    """
    Failure reported by a Content Provider for a single path.

    Attributes:
        kind: Failure category.
        path: Project-relative path that could not be served.
    """

    def __init__(self, kind: ProviderErrorKind, path: str, message: str = "") -> None:
        self.kind = kind
        self.path = path
        self.message = message or kind.value
        super().__init__(f"[{kind.value}] {path or '/'}: {self.message}")


class AnalysisTimeoutError(CompGraphError, TimeoutError):
    """The operation deadline expired before all phases completed."""


class SerializationError(CompGraphError):
    """Internal invariant violated while exporting the forest."""


# -----------------------------------------------------------------------------
# WARNING TRACKING MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisWarning:
    """
    Recoverable failure recorded during a phase.

    Attributes:
        path: Project-relative path of the entry that was skipped.
        error: Descriptive message.
    """
    path: str
    error: str
