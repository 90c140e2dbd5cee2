# SPDX-License-Identifier: MIT
"""Storage backend factory.

Reads ``STORAGE_TYPE`` (default ``"localstorage"``) and builds the matching
remote backend. Native Redis protocol variants cannot run in the supported
deployment targets, so they are served by the Upstash REST backend instead;
the substitution is listed in :data:`STORAGE_POLICY` and logged.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ..config import StorageType, get_storage_type, parse_storage_type
from .protocol import StorageBackend

logger = logging.getLogger("mediastate")

STORAGE_POLICY: Mapping[StorageType, StorageType | None] = MappingProxyType(
    {
        "localstorage": None,
        "redis": "upstash",
        "kvrocks": "upstash",
        "upstash": "upstash",
    }
)
"""Requested variant → variant actually constructed (``None``: no remote backend)."""


@dataclass(frozen=True)
class StorageSelection:
    """Outcome of applying :data:`STORAGE_POLICY` to a requested variant."""

    requested: StorageType
    effective: StorageType | None

    @property
    def fallback(self) -> bool:
        """True when a remote variant was replaced by a different one."""
        return self.effective is not None and self.effective != self.requested


def resolve_storage_type(requested: str | None) -> StorageSelection:
    """Map a raw configuration value to the variant that will be built."""
    storage_type = parse_storage_type(requested)
    return StorageSelection(requested=storage_type, effective=STORAGE_POLICY[storage_type])


def _build_upstash() -> StorageBackend:
    try:
        from .upstash import UpstashRedisStorage
    except ImportError as exc:
        raise RuntimeError(
            "Upstash storage backend requires extra dependencies. Install with: pip install 'mediastate[upstash]'"
        ) from exc
    return UpstashRedisStorage()


_BUILDERS = {
    "upstash": _build_upstash,
}


async def create_storage(storage_type: str | None = None) -> StorageBackend | None:
    """Construct the configured remote backend.

    Args:
        storage_type: Variant to build; defaults to :func:`~mediastate.config.get_storage_type`.

    Returns:
        The backend, or ``None`` for ``"localstorage"``: the caller is then
        expected to supply a locally-resident backend itself.
    """
    selection = resolve_storage_type(storage_type if storage_type is not None else get_storage_type())

    if selection.effective is None:
        logger.debug("STORAGE_TYPE=%s: no remote backend", selection.requested)
        return None

    if selection.fallback:
        logger.warning(
            "%s storage not supported in this environment, falling back to %s",
            selection.requested,
            selection.effective,
        )
    else:
        logger.debug("STORAGE_TYPE=%s: creating %s backend", selection.requested, selection.effective)

    return _BUILDERS[selection.effective]()
