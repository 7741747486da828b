from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory Content Provider serving a project tree from a dict.
3. Shared fixtures for configuration dictionaries.
"""

import os
import sys
import threading
import time
from typing import Any, Dict, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from compgraph.core.providers.base import ContentProvider  # noqa: E402
from compgraph.domain.component_models import DirectoryEntry  # noqa: E402
from compgraph.domain.errors import ProviderError, ProviderErrorKind  # noqa: E402


# -----------------------------------------------------------------------------
# In-Memory Provider
# -----------------------------------------------------------------------------
class MemoryProvider(ContentProvider):
    """
    Content Provider serving `{path: text}` from memory.

    Directories are implied by the file paths. `failures` maps a path to the
    ProviderErrorKind raised for it, `sizes` overrides reported sizes and
    `delays` makes fetches of a path sleep before answering.
    """

    def __init__(
            self,
            files: Dict[str, str],
            *,
            failures: Optional[Dict[str, ProviderErrorKind]] = None,
            sizes: Optional[Dict[str, int]] = None,
            delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.files = dict(files)
        self.failures = dict(failures or {})
        self.sizes = dict(sizes or {})
        self.delays = dict(delays or {})
        self.fetched: List[str] = []
        self._lock = threading.Lock()

    def list_directory(self, path: str, timeout: Optional[float] = None) -> List[DirectoryEntry]:
        self._before(path)
        prefix = f"{path}/" if path else ""
        dirs, files = set(), set()
        for file_path in self.files:
            if not file_path.startswith(prefix):
                continue
            head, _, tail = file_path[len(prefix):].partition("/")
            (dirs if tail else files).add(head)
        if path and not dirs and not files:
            raise ProviderError(ProviderErrorKind.NOT_FOUND, path, "No such directory")

        entries = [DirectoryEntry(name=d, path=prefix + d, is_directory=True) for d in sorted(dirs)]
        for name in sorted(files):
            full = prefix + name
            size = self.sizes.get(full, len(self.files[full].encode("utf-8")))
            entries.append(DirectoryEntry(name=name, path=full, is_directory=False, size_bytes=size))
        return entries

    def get_file_content(self, path: str, timeout: Optional[float] = None) -> str:
        self._before(path)
        with self._lock:
            self.fetched.append(path)
        if path not in self.files:
            raise ProviderError(ProviderErrorKind.NOT_FOUND, path, "No such file")
        return self.files[path]

    def _before(self, path: str) -> None:
        delay = self.delays.get(path)
        if delay:
            time.sleep(delay)
        kind = self.failures.get(path)
        if kind is not None:
            raise ProviderError(kind, path, "simulated failure")


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def memory_provider_factory():
    """Return the MemoryProvider class for building per-test trees."""
    return MemoryProvider


@pytest.fixture
def engine_config() -> Dict[str, Any]:
    """Return a complete engine configuration suited for fast tests."""
    return {
        "max_workers": 4,
        "timeout_seconds": 10.0,
        "max_file_size_bytes": 1_000_000,
        "best_effort": False,
        "extensions": [".js", ".jsx", ".ts", ".tsx"],
        "api_url": "https://api.github.com",
        "ref": "",
        "token_env_var": "GITHUB_TOKEN",
        "local_path": "",
    }
