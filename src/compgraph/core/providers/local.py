from __future__ import annotations

"""
Local Checkout Content Provider.

Serves a project tree from the local filesystem through the Content Provider
contract, so the engine can analyze a working copy without network access.
"""

import logging
import os
from typing import List, Optional

from compgraph.core.providers.base import ContentProvider
from compgraph.domain.component_models import DirectoryEntry
from compgraph.domain.errors import ProviderError, ProviderErrorKind

logger = logging.getLogger(__name__)

# Directories never worth descending into
DEFAULT_IGNORED_DIRS = frozenset({".git", "node_modules", "__pycache__", ".idea", ".vscode"})


class LocalContentProvider(ContentProvider):
    """Content Provider backed by a directory on disk."""

    def __init__(self, root_dir: str, ignored_dirs=DEFAULT_IGNORED_DIRS) -> None:
        self.root_dir = os.path.abspath(root_dir)
        self.ignored_dirs = frozenset(ignored_dirs)

    def list_directory(self, path: str, timeout: Optional[float] = None) -> List[DirectoryEntry]:
        abs_path = self._resolve(path)
        try:
            names = sorted(os.listdir(abs_path))
        except FileNotFoundError as e:
            raise ProviderError(ProviderErrorKind.NOT_FOUND, path, str(e)) from e
        except OSError as e:
            raise ProviderError(ProviderErrorKind.TRANSIENT, path, str(e)) from e

        entries: List[DirectoryEntry] = []
        for name in names:
            full = os.path.join(abs_path, name)
            rel = f"{path}/{name}" if path else name
            if os.path.islink(full):
                # Links are not followed, a link to an ancestor would never terminate
                logger.debug(f"Skipping symbolic link: {rel}")
                continue
            if os.path.isdir(full):
                if name in self.ignored_dirs:
                    continue
                entries.append(DirectoryEntry(name=name, path=rel, is_directory=True))
            elif os.path.isfile(full):
                try:
                    size = os.path.getsize(full)
                except OSError:
                    size = 0
                entries.append(DirectoryEntry(name=name, path=rel, is_directory=False, size_bytes=size))
        return entries

    def get_file_content(self, path: str, timeout: Optional[float] = None) -> str:
        abs_path = self._resolve(path)
        try:
            # 'replace' keeps mixed-encoding sources readable
            with open(abs_path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except FileNotFoundError as e:
            raise ProviderError(ProviderErrorKind.NOT_FOUND, path, str(e)) from e
        except OSError as e:
            raise ProviderError(ProviderErrorKind.TRANSIENT, path, str(e)) from e

    def _resolve(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.root_dir, *[p for p in path.split("/") if p]))
        if os.path.commonpath([full, self.root_dir]) != self.root_dir:
            raise ProviderError(ProviderErrorKind.NOT_FOUND, path, "Path escapes the project root.")
        return full
