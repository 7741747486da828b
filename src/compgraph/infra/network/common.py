from __future__ import annotations

from compgraph.domain.constants import APP_VERSION

USER_AGENT = f"CompGraph-Client/{APP_VERSION}"
DEFAULT_TIMEOUT = 10
GITHUB_ACCEPT = "application/vnd.github+json"
