from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the engine, ensuring that the configuration
dictionary conforms to the expected schema. Handles type coercion,
range checks and default value injection.
"""

import logging
import math
from typing import Any, Dict, List, Tuple

from compgraph.domain.config import get_default_config
from compgraph.domain.constants import RECOGNIZED_EXTENSIONS

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (e.g., from the CLI or a persisted session)
    into strictly typed parameters and fills missing keys with defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and a
                                          list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if config is None:
        return defaults, warnings

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    string_fields = ["api_url", "ref", "token_env_var", "local_path"]
    bool_fields = ["best_effort"]
    positive_int_fields = ["max_workers", "max_file_size_bytes"]

    for name in string_fields:
        merged[name] = _as_str(merged.get(name), defaults[name], name, warnings, strict)

    for name in bool_fields:
        merged[name] = _as_bool(merged.get(name), defaults[name], name, warnings, strict)

    for name in positive_int_fields:
        merged[name] = _as_positive_int(merged.get(name), defaults[name], name, warnings, strict)

    merged["timeout_seconds"] = _as_positive_float(
        merged.get("timeout_seconds"), defaults["timeout_seconds"], "timeout_seconds", warnings, strict
    )

    merged["extensions"] = _normalize_extensions(
        _as_list_str(merged.get("extensions"), list(RECOGNIZED_EXTENSIONS), "extensions", warnings, strict),
        warnings,
        strict,
    )

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _reject(msg: str, warnings: List[str], strict: bool, exc_type: type = TypeError) -> None:
    if strict:
        raise exc_type(msg)
    warnings.append(f"{msg} Using fallback.")


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs. Empty strings are legitimate values."""
    if value is None:
        return fallback
    if isinstance(value, str):
        return value.strip()
    _reject(f"Invalid field '{field}': expected str, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    _reject(f"Invalid field '{field}': expected bool, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_positive_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    if value is None:
        return fallback
    if isinstance(value, bool):
        _reject(f"Invalid field '{field}': expected int, received bool.", warnings, strict)
        return fallback

    number = value
    if isinstance(value, str) and not strict:
        try:
            number = int(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {number}.")
        except ValueError:
            number = value

    if not isinstance(number, int):
        _reject(f"Invalid field '{field}': expected int, received {type(value).__name__}.", warnings, strict)
        return fallback
    if number < 1:
        _reject(f"Invalid field '{field}': must be >= 1, received {number}.", warnings, strict, ValueError)
        return fallback
    return number


def _as_positive_float(value: Any, fallback: float, field: str, warnings: List[str], strict: bool) -> float:
    if value is None:
        return fallback
    if isinstance(value, bool):
        _reject(f"Invalid field '{field}': expected number, received bool.", warnings, strict)
        return fallback

    number = value
    if isinstance(value, str) and not strict:
        try:
            number = float(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {number}.")
        except ValueError:
            number = value

    if not isinstance(number, (int, float)):
        _reject(f"Invalid field '{field}': expected number, received {type(value).__name__}.", warnings, strict)
        return fallback
    if not math.isfinite(number):
        _reject(f"Invalid field '{field}': must be finite, received {number}.", warnings, strict, ValueError)
        return fallback
    if number <= 0:
        _reject(f"Invalid field '{field}': must be > 0, received {number}.", warnings, strict, ValueError)
        return fallback
    return float(number)


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out if out else list(fallback)

    _reject(f"Invalid field '{field}': expected list[str], received {type(value).__name__}.", warnings, strict)
    return list(fallback)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _normalize_extensions(exts: List[str], warnings: List[str], strict: bool) -> List[str]:
    """Ensure all file extensions are lower-case and prefixed with a dot."""
    out: List[str] = []
    for ext in exts:
        e = ext.strip().lower()
        if not e:
            continue
        if not e.startswith("."):
            if strict:
                raise ValueError(f"Invalid extension '{ext}': must start with '.'.")
            warnings.append(f"Extension '{ext}' corrected to '.{e}'.")
            e = "." + e
        if e not in out:
            out.append(e)
    return out if out else list(RECOGNIZED_EXTENSIONS)
