from __future__ import annotations

"""
Network Communication Infrastructure.

Exposes the remote Content Provider implementations.
"""

from compgraph.infra.network.github_client import GitHubContentProvider

__all__ = [
    "GitHubContentProvider",
]
