# SPDX-License-Identifier: MIT
"""Configuration management for mediastate.

This module handles:
- Logging setup
- Storage backend selection from ``STORAGE_TYPE``
- Upstash credential validation
- Local data path resolution
"""

import logging
import os
import pathlib
import sys
from functools import lru_cache
from typing import Literal, get_args

# ---------- Logging configuration ----------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("mediastate")


# ---------- Storage type ----------
StorageType = Literal["localstorage", "redis", "upstash", "kvrocks"]
"""Backend variants understood by the selector."""

STORAGE_TYPES: tuple[str, ...] = get_args(StorageType)
DEFAULT_STORAGE_TYPE: StorageType = "localstorage"


def parse_storage_type(value: str | None) -> StorageType:
    """Normalise a raw configuration value into a :data:`StorageType`.

    Unset, blank, and unrecognised values map to ``"localstorage"``.
    """
    if not value or not value.strip():
        return DEFAULT_STORAGE_TYPE
    normalised = value.strip().lower()
    if normalised not in STORAGE_TYPES:
        logger.warning("Unknown STORAGE_TYPE %r, using %r", value, DEFAULT_STORAGE_TYPE)
        return DEFAULT_STORAGE_TYPE
    return normalised  # type: ignore[return-value]


@lru_cache(maxsize=1)
def get_storage_type() -> StorageType:
    """Read the process-wide storage type (cached after the first call).

    ``STORAGE_TYPE`` takes precedence; ``NEXT_PUBLIC_STORAGE_TYPE`` is read
    when it is unset so existing deployments keep working.
    """
    raw = os.getenv("STORAGE_TYPE") or os.getenv("NEXT_PUBLIC_STORAGE_TYPE")
    return parse_storage_type(raw)


# ---------- Upstash credentials ----------
_UPSTASH_REQUIRED: dict[str, str] = {
    "UPSTASH_URL": "Upstash Redis REST endpoint (e.g. https://eu1-xyz.upstash.io)",
    "UPSTASH_TOKEN": "Upstash Redis REST token",
}


def get_upstash_credentials() -> tuple[str, str]:
    """Return ``(url, token)`` for the Upstash REST API.

    Raises:
        RuntimeError: If any required variable is missing or blank. All
            missing variables are reported in one message.
    """
    missing = [name for name in _UPSTASH_REQUIRED if not os.getenv(name, "").strip()]
    if missing:
        details = "\n".join(f"  - {name}: {_UPSTASH_REQUIRED[name]}" for name in missing)
        raise RuntimeError(f"Missing required Upstash environment variable(s):\n{details}")

    url = os.environ["UPSTASH_URL"].strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url, os.environ["UPSTASH_TOKEN"].strip()


# ---------- Search history ----------
DEFAULT_SEARCH_HISTORY_LIMIT = 20


def get_search_history_limit() -> int:
    """Maximum number of keywords kept per user (``SEARCH_HISTORY_LIMIT``)."""
    raw = os.getenv("SEARCH_HISTORY_LIMIT", "").strip()
    if not raw:
        return DEFAULT_SEARCH_HISTORY_LIMIT
    try:
        limit = int(raw)
    except ValueError as e:
        raise RuntimeError(f"SEARCH_HISTORY_LIMIT must be an integer, got {raw!r}") from e
    if limit < 1:
        raise RuntimeError(f"SEARCH_HISTORY_LIMIT must be positive, got {limit}")
    return limit


# ---------- Local data path ----------
def get_data_path() -> pathlib.Path | None:
    """Resolve ``MEDIASTATE_DATA_PATH`` for the local JSON backend.

    Returns ``None`` when unset, meaning the local backend keeps data in memory.

    Raises:
        RuntimeError: If the path points at a directory or its parent does not exist.
    """
    raw = os.getenv("MEDIASTATE_DATA_PATH", "").strip()
    if not raw:
        return None
    try:
        path = pathlib.Path(raw).expanduser().resolve()
    except (ValueError, OSError) as e:
        raise RuntimeError(f"Invalid MEDIASTATE_DATA_PATH '{raw}': {e}") from e
    if path.is_dir():
        raise RuntimeError(f"MEDIASTATE_DATA_PATH: expected a file, got a directory: {path}")
    if not path.parent.exists():
        raise RuntimeError(f"MEDIASTATE_DATA_PATH: parent directory does not exist: {path.parent}")
    return path
