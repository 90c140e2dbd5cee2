# SPDX-License-Identifier: MIT
"""Storage backend protocols and capability probing.

Defines the required interface every backend implements plus the optional
capabilities a backend may add. Optional capabilities are probed once per
backend instance with :func:`probe_capabilities`.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from ..models import AdminConfig, Favorite, PlayRecord, SkipConfig


@runtime_checkable
class StorageBackend(Protocol):
    """Required persistence operations.

    Play records and favorites are addressed by ``(user_name, key)`` where
    *key* comes from :func:`~mediastate.storage.keys.generate_storage_key`.
    """

    # ------------------------------------------------------------------
    # Play records
    # ------------------------------------------------------------------

    async def get_play_record(self, user_name: str, key: str) -> PlayRecord | None:
        """Return the record stored under *key*, or ``None``."""
        ...

    async def set_play_record(self, user_name: str, key: str, record: PlayRecord) -> None:
        """Create or replace the record stored under *key*."""
        ...

    async def get_all_play_records(self, user_name: str) -> dict[str, PlayRecord]:
        """Return every record of *user_name* keyed by composite key."""
        ...

    async def delete_play_record(self, user_name: str, key: str) -> None: ...

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def get_favorite(self, user_name: str, key: str) -> Favorite | None: ...

    async def set_favorite(self, user_name: str, key: str, favorite: Favorite) -> None: ...

    async def get_all_favorites(self, user_name: str) -> dict[str, Favorite]: ...

    async def delete_favorite(self, user_name: str, key: str) -> None: ...

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def register_user(self, user_name: str, password: str) -> None:
        """Create a user.

        Raises:
            ValueError: If *user_name* is already registered.
        """
        ...

    async def verify_user(self, user_name: str, password: str) -> bool: ...

    async def check_user_exist(self, user_name: str) -> bool: ...

    async def change_password(self, user_name: str, new_password: str) -> None: ...

    async def delete_user(self, user_name: str) -> None:
        """Remove the user together with all data stored for them."""
        ...

    # ------------------------------------------------------------------
    # Search history
    # ------------------------------------------------------------------

    async def get_search_history(self, user_name: str) -> list[str]:
        """Return keywords, most recent first."""
        ...

    async def add_search_history(self, user_name: str, keyword: str) -> None: ...

    async def delete_search_history(self, user_name: str, keyword: str | None = None) -> None:
        """Delete one keyword, or the whole history when *keyword* is ``None``."""
        ...


# ----------------------------------------------------------------------
# Optional capabilities
# ----------------------------------------------------------------------


@runtime_checkable
class UserListing(Protocol):
    async def get_all_users(self) -> list[str]: ...


@runtime_checkable
class AdminConfigStore(Protocol):
    async def get_admin_config(self) -> AdminConfig | None: ...

    async def set_admin_config(self, config: AdminConfig) -> None: ...


@runtime_checkable
class SkipConfigStore(Protocol):
    """Skip configs take *source* and *id* separately, not a composite key."""

    async def get_skip_config(self, user_name: str, source: str, id: str) -> SkipConfig | None: ...  # noqa: A002

    async def set_skip_config(self, user_name: str, source: str, id: str, config: SkipConfig) -> None: ...  # noqa: A002

    async def delete_skip_config(self, user_name: str, source: str, id: str) -> None: ...  # noqa: A002

    async def get_all_skip_configs(self, user_name: str) -> dict[str, SkipConfig]: ...


@runtime_checkable
class DataClearing(Protocol):
    async def clear_all_data(self) -> None: ...


class Capability(str, Enum):
    """Optional backend operations, each valued by the backend method name.

    Each method is its own capability, so a backend may offer a getter
    without the matching setter.
    """

    USER_LISTING = "get_all_users"
    ADMIN_CONFIG_READ = "get_admin_config"
    ADMIN_CONFIG_WRITE = "set_admin_config"
    SKIP_CONFIG_READ = "get_skip_config"
    SKIP_CONFIG_WRITE = "set_skip_config"
    SKIP_CONFIG_DELETE = "delete_skip_config"
    SKIP_CONFIG_LIST = "get_all_skip_configs"
    CLEAR_ALL = "clear_all_data"


def probe_capabilities(backend: object) -> frozenset[Capability]:
    """Return the optional operations *backend* exposes as callables."""
    return frozenset(cap for cap in Capability if callable(getattr(backend, cap.value, None)))
