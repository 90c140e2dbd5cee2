# SPDX-License-Identifier: MIT
"""Facade over the active storage backend.

Every operation resolves the backend through a
:class:`~mediastate.storage.provider.StorageProvider`, composes the storage
key where one is needed and forwards the call. Backend errors propagate
unchanged.

Usage::

    from mediastate.db import db

    await db.save_play_record("alice", "src1", "42", record)
    record = await db.get_play_record("alice", "src1", "42")
"""

from __future__ import annotations

import logging
from typing import cast

from .exceptions import StorageNotConfiguredError, UnsupportedOperationError
from .models import AdminConfig, Favorite, PlayRecord, SkipConfig
from .storage.keys import generate_storage_key
from .storage.protocol import (
    AdminConfigStore,
    Capability,
    DataClearing,
    SkipConfigStore,
    StorageBackend,
    UserListing,
    probe_capabilities,
)
from .storage.provider import StorageProvider, get_provider

logger = logging.getLogger("mediastate")


class DbManager:
    """Per-user media state operations.

    Args:
        provider: Source of the remote backend. Defaults to the process-wide
            provider, looked up on first use.
        local_storage: Backend used when the provider yields no remote backend
            (``STORAGE_TYPE=localstorage``).
    """

    def __init__(self, provider: StorageProvider | None = None, *, local_storage: StorageBackend | None = None) -> None:
        self._provider = provider
        self._local_storage = local_storage
        self._probed: tuple[StorageBackend, frozenset[Capability]] | None = None

    async def _resolve(self) -> tuple[StorageBackend, frozenset[Capability]]:
        """Return the active backend and its optional capabilities (probed once per instance)."""
        provider = self._provider or get_provider()
        storage = await provider.get()
        if storage is None:
            storage = self._local_storage
        if storage is None:
            raise StorageNotConfiguredError("No remote storage configured and no local storage backend was provided")

        if self._probed is None or self._probed[0] is not storage:
            capabilities = probe_capabilities(storage)
            logger.debug(
                "Using %s storage (capabilities: %s)",
                type(storage).__name__,
                ", ".join(sorted(c.value for c in capabilities)) or "none",
            )
            self._probed = (storage, capabilities)
        return self._probed

    async def _storage(self) -> StorageBackend:
        storage, _ = await self._resolve()
        return storage

    # ------------------------------------------------------------------
    # Play records
    # ------------------------------------------------------------------

    async def get_play_record(self, user_name: str, source: str, id: str) -> PlayRecord | None:  # noqa: A002
        storage = await self._storage()
        return await storage.get_play_record(user_name, generate_storage_key(source, id))

    async def save_play_record(self, user_name: str, source: str, id: str, record: PlayRecord) -> None:  # noqa: A002
        storage = await self._storage()
        await storage.set_play_record(user_name, generate_storage_key(source, id), record)

    async def get_all_play_records(self, user_name: str) -> dict[str, PlayRecord]:
        storage = await self._storage()
        return await storage.get_all_play_records(user_name)

    async def delete_play_record(self, user_name: str, source: str, id: str) -> None:  # noqa: A002
        storage = await self._storage()
        await storage.delete_play_record(user_name, generate_storage_key(source, id))

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def get_favorite(self, user_name: str, source: str, id: str) -> Favorite | None:  # noqa: A002
        storage = await self._storage()
        return await storage.get_favorite(user_name, generate_storage_key(source, id))

    async def save_favorite(self, user_name: str, source: str, id: str, favorite: Favorite) -> None:  # noqa: A002
        storage = await self._storage()
        await storage.set_favorite(user_name, generate_storage_key(source, id), favorite)

    async def get_all_favorites(self, user_name: str) -> dict[str, Favorite]:
        storage = await self._storage()
        return await storage.get_all_favorites(user_name)

    async def delete_favorite(self, user_name: str, source: str, id: str) -> None:  # noqa: A002
        storage = await self._storage()
        await storage.delete_favorite(user_name, generate_storage_key(source, id))

    async def is_favorited(self, user_name: str, source: str, id: str) -> bool:  # noqa: A002
        return await self.get_favorite(user_name, source, id) is not None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def register_user(self, user_name: str, password: str) -> None:
        storage = await self._storage()
        await storage.register_user(user_name, password)

    async def verify_user(self, user_name: str, password: str) -> bool:
        storage = await self._storage()
        return await storage.verify_user(user_name, password)

    async def check_user_exist(self, user_name: str) -> bool:
        storage = await self._storage()
        return await storage.check_user_exist(user_name)

    async def change_password(self, user_name: str, new_password: str) -> None:
        storage = await self._storage()
        await storage.change_password(user_name, new_password)

    async def delete_user(self, user_name: str) -> None:
        storage = await self._storage()
        await storage.delete_user(user_name)

    async def get_all_users(self) -> list[str]:
        """Every registered user name, or ``[]`` if the backend cannot list users."""
        storage, capabilities = await self._resolve()
        if Capability.USER_LISTING not in capabilities:
            return []
        return await cast(UserListing, storage).get_all_users()

    # ------------------------------------------------------------------
    # Search history
    # ------------------------------------------------------------------

    async def get_search_history(self, user_name: str) -> list[str]:
        storage = await self._storage()
        return await storage.get_search_history(user_name)

    async def add_search_history(self, user_name: str, keyword: str) -> None:
        storage = await self._storage()
        await storage.add_search_history(user_name, keyword)

    async def delete_search_history(self, user_name: str, keyword: str | None = None) -> None:
        """Delete *keyword*, or the whole history when it is ``None``."""
        storage = await self._storage()
        await storage.delete_search_history(user_name, keyword)

    # ------------------------------------------------------------------
    # Admin config
    # ------------------------------------------------------------------

    async def get_admin_config(self) -> AdminConfig | None:
        storage, capabilities = await self._resolve()
        if Capability.ADMIN_CONFIG_READ not in capabilities:
            return None
        return await cast(AdminConfigStore, storage).get_admin_config()

    async def save_admin_config(self, config: AdminConfig) -> None:
        """Persist *config*; does nothing if the backend has no admin config store."""
        storage, capabilities = await self._resolve()
        if Capability.ADMIN_CONFIG_WRITE in capabilities:
            await cast(AdminConfigStore, storage).set_admin_config(config)

    # ------------------------------------------------------------------
    # Skip configs (source and id are passed through, not composed)
    # ------------------------------------------------------------------

    async def get_skip_config(self, user_name: str, source: str, id: str) -> SkipConfig | None:  # noqa: A002
        storage, capabilities = await self._resolve()
        if Capability.SKIP_CONFIG_READ not in capabilities:
            return None
        return await cast(SkipConfigStore, storage).get_skip_config(user_name, source, id)

    async def set_skip_config(self, user_name: str, source: str, id: str, config: SkipConfig) -> None:  # noqa: A002
        storage, capabilities = await self._resolve()
        if Capability.SKIP_CONFIG_WRITE in capabilities:
            await cast(SkipConfigStore, storage).set_skip_config(user_name, source, id, config)

    async def delete_skip_config(self, user_name: str, source: str, id: str) -> None:  # noqa: A002
        storage, capabilities = await self._resolve()
        if Capability.SKIP_CONFIG_DELETE in capabilities:
            await cast(SkipConfigStore, storage).delete_skip_config(user_name, source, id)

    async def get_all_skip_configs(self, user_name: str) -> dict[str, SkipConfig]:
        storage, capabilities = await self._resolve()
        if Capability.SKIP_CONFIG_LIST not in capabilities:
            return {}
        return await cast(SkipConfigStore, storage).get_all_skip_configs(user_name)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear_all_data(self) -> None:
        """Delete all stored data.

        Raises:
            UnsupportedOperationError: If the backend cannot clear its data.
        """
        storage, capabilities = await self._resolve()
        if Capability.CLEAR_ALL not in capabilities:
            raise UnsupportedOperationError(f"{type(storage).__name__} does not support clearing all data")
        await cast(DataClearing, storage).clear_all_data()


db = DbManager()
"""Default facade bound to the process-wide storage provider."""
