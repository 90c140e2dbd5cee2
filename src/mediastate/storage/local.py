# SPDX-License-Identifier: MIT
"""Locally-resident storage backend.

Keeps all state in one JSON document, optionally persisted to
``MEDIASTATE_DATA_PATH``. Used when ``STORAGE_TYPE=localstorage`` by
injecting it into :class:`~mediastate.db.DbManager`; the factory never
builds it.
"""

from __future__ import annotations

import asyncio
import json
import logging
import pathlib
from typing import Any

import aiofiles
import aiofiles.os

from ..config import get_data_path, get_search_history_limit
from ..models import AdminConfig, Favorite, PlayRecord, SkipConfig
from .keys import generate_storage_key

logger = logging.getLogger("mediastate")

_SECTIONS = ("users", "play_records", "favorites", "search_history", "skip_configs")


def _empty_state() -> dict[str, Any]:
    state: dict[str, Any] = {section: {} for section in _SECTIONS}
    state["admin_config"] = None
    return state


class LocalStorage:
    """JSON-document backend implementing every optional capability.

    Args:
        path: JSON file to persist to. ``None`` keeps data in memory only.
        history_limit: Keywords kept per user; defaults to ``SEARCH_HISTORY_LIMIT``.
    """

    def __init__(self, path: pathlib.Path | None = None, history_limit: int | None = None) -> None:
        self._path = path
        self._history_limit = history_limit or get_search_history_limit()
        self._state: dict[str, Any] | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_env(cls) -> LocalStorage:
        """Build a backend persisting to ``MEDIASTATE_DATA_PATH`` (in memory when unset)."""
        return cls(path=get_data_path())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def _load(self) -> dict[str, Any]:
        if self._state is not None:
            return self._state
        state = _empty_state()
        if self._path is not None and await aiofiles.os.path.exists(self._path):
            async with aiofiles.open(self._path, encoding="utf-8") as f:
                state.update(json.loads(await f.read()))
            logger.debug("Loaded local storage from %s", self._path)
        self._state = state
        return state

    async def _save(self) -> None:
        if self._path is None or self._state is None:
            return
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self._state, ensure_ascii=False))
        await aiofiles.os.replace(tmp_path, self._path)

    async def _read(self, section: str, user_name: str) -> dict[str, Any]:
        async with self._lock:
            state = await self._load()
            return dict(state[section].get(user_name, {}))

    async def _write(self, section: str, user_name: str, key: str, value: dict[str, Any] | None) -> None:
        async with self._lock:
            state = await self._load()
            bucket = state[section].setdefault(user_name, {})
            if value is None:
                bucket.pop(key, None)
            else:
                bucket[key] = value
            await self._save()

    # ------------------------------------------------------------------
    # Play records
    # ------------------------------------------------------------------

    async def get_play_record(self, user_name: str, key: str) -> PlayRecord | None:
        raw = (await self._read("play_records", user_name)).get(key)
        return None if raw is None else PlayRecord.model_validate(raw)

    async def set_play_record(self, user_name: str, key: str, record: PlayRecord) -> None:
        await self._write("play_records", user_name, key, record.model_dump())

    async def get_all_play_records(self, user_name: str) -> dict[str, PlayRecord]:
        records = await self._read("play_records", user_name)
        return {key: PlayRecord.model_validate(raw) for key, raw in records.items()}

    async def delete_play_record(self, user_name: str, key: str) -> None:
        await self._write("play_records", user_name, key, None)

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def get_favorite(self, user_name: str, key: str) -> Favorite | None:
        raw = (await self._read("favorites", user_name)).get(key)
        return None if raw is None else Favorite.model_validate(raw)

    async def set_favorite(self, user_name: str, key: str, favorite: Favorite) -> None:
        await self._write("favorites", user_name, key, favorite.model_dump())

    async def get_all_favorites(self, user_name: str) -> dict[str, Favorite]:
        favorites = await self._read("favorites", user_name)
        return {key: Favorite.model_validate(raw) for key, raw in favorites.items()}

    async def delete_favorite(self, user_name: str, key: str) -> None:
        await self._write("favorites", user_name, key, None)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def register_user(self, user_name: str, password: str) -> None:
        async with self._lock:
            state = await self._load()
            if user_name in state["users"]:
                raise ValueError(f"User already exists: {user_name}")
            state["users"][user_name] = password
            await self._save()
        logger.info("Registered user %s", user_name)

    async def verify_user(self, user_name: str, password: str) -> bool:
        async with self._lock:
            state = await self._load()
            return user_name in state["users"] and state["users"][user_name] == password

    async def check_user_exist(self, user_name: str) -> bool:
        async with self._lock:
            state = await self._load()
            return user_name in state["users"]

    async def change_password(self, user_name: str, new_password: str) -> None:
        async with self._lock:
            state = await self._load()
            state["users"][user_name] = new_password
            await self._save()

    async def delete_user(self, user_name: str) -> None:
        async with self._lock:
            state = await self._load()
            for section in _SECTIONS:
                state[section].pop(user_name, None)
            await self._save()
        logger.info("Deleted user %s", user_name)

    async def get_all_users(self) -> list[str]:
        async with self._lock:
            state = await self._load()
            return list(state["users"])

    # ------------------------------------------------------------------
    # Search history
    # ------------------------------------------------------------------

    async def get_search_history(self, user_name: str) -> list[str]:
        async with self._lock:
            state = await self._load()
            return list(state["search_history"].get(user_name, []))

    async def add_search_history(self, user_name: str, keyword: str) -> None:
        async with self._lock:
            state = await self._load()
            history = [kw for kw in state["search_history"].get(user_name, []) if kw != keyword]
            state["search_history"][user_name] = [keyword, *history][: self._history_limit]
            await self._save()

    async def delete_search_history(self, user_name: str, keyword: str | None = None) -> None:
        async with self._lock:
            state = await self._load()
            if keyword is None:
                state["search_history"].pop(user_name, None)
            else:
                history = state["search_history"].get(user_name, [])
                state["search_history"][user_name] = [kw for kw in history if kw != keyword]
            await self._save()

    # ------------------------------------------------------------------
    # Admin config
    # ------------------------------------------------------------------

    async def get_admin_config(self) -> AdminConfig | None:
        async with self._lock:
            raw = (await self._load())["admin_config"]
        return None if raw is None else AdminConfig.model_validate(raw)

    async def set_admin_config(self, config: AdminConfig) -> None:
        async with self._lock:
            state = await self._load()
            state["admin_config"] = config.model_dump(by_alias=True)
            await self._save()

    # ------------------------------------------------------------------
    # Skip configs
    # ------------------------------------------------------------------

    async def get_skip_config(self, user_name: str, source: str, id: str) -> SkipConfig | None:  # noqa: A002
        raw = (await self._read("skip_configs", user_name)).get(generate_storage_key(source, id))
        return None if raw is None else SkipConfig.model_validate(raw)

    async def set_skip_config(self, user_name: str, source: str, id: str, config: SkipConfig) -> None:  # noqa: A002
        await self._write("skip_configs", user_name, generate_storage_key(source, id), config.model_dump())

    async def delete_skip_config(self, user_name: str, source: str, id: str) -> None:  # noqa: A002
        await self._write("skip_configs", user_name, generate_storage_key(source, id), None)

    async def get_all_skip_configs(self, user_name: str) -> dict[str, SkipConfig]:
        configs = await self._read("skip_configs", user_name)
        return {key: SkipConfig.model_validate(raw) for key, raw in configs.items()}

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear_all_data(self) -> None:
        async with self._lock:
            self._state = _empty_state()
            await self._save()
        logger.warning("Cleared all local data")
