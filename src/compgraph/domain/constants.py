from __future__ import annotations

"""
Domain Constants.

Provides centralized access to application-wide constants: versioning,
recognized source extensions and the default resource limits applied to
every analysis run.
"""

from typing import List

APP_VERSION = "1.0.0"
CURRENT_CONFIG_VERSION = "1.0.0"

# Source files eligible for component discovery
RECOGNIZED_EXTENSIONS: List[str] = [".js", ".jsx", ".ts", ".tsx"]

# Files above this size are skipped without being fetched
DEFAULT_MAX_FILE_SIZE_BYTES = 1_000_000

DEFAULT_MAX_WORKERS = 8
DEFAULT_TIMEOUT_SECONDS = 75.0

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TOKEN_ENV_VAR = "GITHUB_TOKEN"
