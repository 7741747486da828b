from __future__ import annotations

"""
Content Provider Interface.

Abstract contract for the collaborator that serves directory listings and
file text of a project tree. Implementations raise ProviderError for every
failure they can classify.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from compgraph.domain.component_models import DirectoryEntry


class ContentProvider(ABC):
    """
    Abstract source of project content.

    Paths are project-relative and '/' separated; the empty string denotes
    the project root. `timeout` is the remaining time budget in seconds for
    the single call, or None for no limit.
    """

    @abstractmethod
    def list_directory(self, path: str, timeout: Optional[float] = None) -> List[DirectoryEntry]:
        """
        List the entries of a directory in a stable order.

        Raises:
            ProviderError: If the listing cannot be served.
        """

    @abstractmethod
    def get_file_content(self, path: str, timeout: Optional[float] = None) -> str:
        """
        Return the decoded text of a file.

        Raises:
            ProviderError: If the content cannot be served.
        """

    def close(self) -> None:
        """Release any held resources."""
