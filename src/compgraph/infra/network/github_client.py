from __future__ import annotations

"""
GitHub Contents API Provider.

Implements the Content Provider contract on top of the GitHub REST
"contents" endpoint. HTTP and transport failures are translated into
ProviderError kinds so the engine never sees a raw `requests` exception.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from compgraph.core.providers.base import ContentProvider
from compgraph.domain.component_models import DirectoryEntry
from compgraph.domain.constants import DEFAULT_API_URL, DEFAULT_MAX_WORKERS
from compgraph.domain.errors import ProviderError, ProviderErrorKind
from compgraph.infra.network.common import DEFAULT_TIMEOUT, GITHUB_ACCEPT, USER_AGENT

logger = logging.getLogger(__name__)


class GitHubContentProvider(ContentProvider):
    """
    Content Provider reading a repository through the GitHub REST API.

    A single `requests.Session` is shared by all worker threads; its
    connection pool is sized to the worker count.
    """

    def __init__(
            self,
            owner: str,
            repo: str,
            token: str,
            *,
            api_url: str = DEFAULT_API_URL,
            ref: str = "",
            pool_size: int = DEFAULT_MAX_WORKERS,
            session: Optional[requests.Session] = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.ref = ref
        self._base_url = f"{api_url.rstrip('/')}/repos/{quote(owner)}/{quote(repo)}/contents"

        self._session = session or requests.Session()
        if session is None:
            adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
            self._session.mount("https://", adapter)
            self._session.mount("http://", adapter)
        self._session.headers.update({
            "Accept": GITHUB_ACCEPT,
            "Authorization": f"Bearer {token}",
            "User-Agent": USER_AGENT,
        })

    # ------------------------------------------------------------------
    # CONTENT PROVIDER CONTRACT
    # ------------------------------------------------------------------

    def list_directory(self, path: str, timeout: Optional[float] = None) -> List[DirectoryEntry]:
        data = self._get_json(path, timeout)
        if not isinstance(data, list):
            raise ProviderError(ProviderErrorKind.NOT_FOUND, path, "Path is not a directory.")

        entries: List[DirectoryEntry] = []
        for item in data:
            item_type = item.get("type")
            if item_type not in ("dir", "file"):
                # Symlinks and submodules are not followed
                continue
            entries.append(DirectoryEntry(
                name=str(item.get("name", "")),
                path=str(item.get("path", "")),
                is_directory=item_type == "dir",
                size_bytes=int(item.get("size") or 0),
            ))
        return entries

    def get_file_content(self, path: str, timeout: Optional[float] = None) -> str:
        data = self._get_json(path, timeout)
        if not isinstance(data, dict) or data.get("type") != "file":
            raise ProviderError(ProviderErrorKind.NOT_FOUND, path, "Path is not a file.")

        encoding = data.get("encoding")
        if encoding != "base64":
            raise ProviderError(
                ProviderErrorKind.NOT_FOUND, path, f"Content not served inline (encoding={encoding!r})."
            )
        try:
            raw = base64.b64decode(data.get("content") or "")
        except (binascii.Error, ValueError) as e:
            raise ProviderError(ProviderErrorKind.TRANSIENT, path, f"Malformed content payload: {e}") from e
        return raw.decode("utf-8", errors="replace")

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # HTTP HELPERS
    # ------------------------------------------------------------------

    def _get_json(self, path: str, timeout: Optional[float]) -> Any:
        url = f"{self._base_url}/{quote(path)}" if path else self._base_url
        params: Dict[str, str] = {"ref": self.ref} if self.ref else {}
        effective_timeout = DEFAULT_TIMEOUT if timeout is None else max(0.1, min(DEFAULT_TIMEOUT, timeout))

        try:
            response = self._session.get(url, params=params, timeout=effective_timeout)
        except requests.exceptions.Timeout as e:
            raise ProviderError(ProviderErrorKind.TRANSIENT, path, f"Request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(ProviderErrorKind.TRANSIENT, path, f"GitHub API communication failure: {e}") from e

        _raise_for_status(response, path)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(ProviderErrorKind.TRANSIENT, path, f"Invalid JSON payload: {e}") from e


def _raise_for_status(response: requests.Response, path: str) -> None:
    """Translate a non-2xx GitHub response into a ProviderError."""
    status = response.status_code
    if status < 400:
        return

    if status == 404:
        raise ProviderError(ProviderErrorKind.NOT_FOUND, path, "HTTP 404")
    if status == 429 or (status == 403 and response.headers.get("X-RateLimit-Remaining") == "0"):
        reset = response.headers.get("X-RateLimit-Reset", "unknown")
        raise ProviderError(ProviderErrorKind.RATE_LIMITED, path, f"HTTP {status}, rate limit resets at {reset}")
    if status in (401, 403):
        raise ProviderError(ProviderErrorKind.NOT_FOUND, path, f"HTTP {status}: access denied")
    raise ProviderError(ProviderErrorKind.TRANSIENT, path, f"HTTP {status}")
