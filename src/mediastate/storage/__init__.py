# SPDX-License-Identifier: MIT
"""Pluggable storage backends for mediastate.

Usage::

    from mediastate.storage import get_storage

    storage = await get_storage()  # None when STORAGE_TYPE=localstorage
"""

from .factory import STORAGE_POLICY, StorageSelection, create_storage, resolve_storage_type
from .keys import generate_storage_key, split_storage_key
from .local import LocalStorage
from .protocol import Capability, StorageBackend, probe_capabilities
from .provider import StorageProvider, get_provider, get_storage

__all__ = [
    "STORAGE_POLICY",
    "Capability",
    "LocalStorage",
    "StorageBackend",
    "StorageProvider",
    "StorageSelection",
    "create_storage",
    "generate_storage_key",
    "get_provider",
    "get_storage",
    "probe_capabilities",
    "resolve_storage_type",
    "split_storage_key",
]
