# SPDX-License-Identifier: MIT
"""Upstash Redis storage backend.

Talks to Upstash over its REST protocol: each Redis command is POSTed as a
JSON array and answered with ``{"result": ...}`` or ``{"error": ...}``.
Entities are stored as JSON strings.

Key layout::

    u:{user}:pwd              password
    u:{user}:pr:{source+id}   play record
    u:{user}:fav:{source+id}  favorite
    u:{user}:skip:{source+id} skip config
    u:{user}:sh               search history (list, newest first)
    admin:config              admin config
"""

from __future__ import annotations

import logging
import re
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from ..config import get_search_history_limit, get_upstash_credentials
from ..models import AdminConfig, Favorite, PlayRecord, SkipConfig
from .keys import generate_storage_key

logger = logging.getLogger("mediastate")

ModelT = TypeVar("ModelT", bound=BaseModel)

ADMIN_CONFIG_KEY = "admin:config"
USER_PREFIX = "u:"
PASSWORD_SUFFIX = ":pwd"

_GLOB_SPECIAL_RE = re.compile(r"([\\*?\[\]])")


def escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters so *value* matches only itself in ``KEYS``."""
    return _GLOB_SPECIAL_RE.sub(r"\\\1", value)


class UpstashRedisStorage:
    """Upstash Redis backend implementing every optional capability.

    Required environment variables::

        UPSTASH_URL     REST endpoint (https:// is added when missing)
        UPSTASH_TOKEN   REST bearer token

    Optional environment variables::

        SEARCH_HISTORY_LIMIT   Keywords kept per user (default: 20)
    """

    def __init__(self) -> None:
        self._url, token = get_upstash_credentials()
        self._headers = {"Authorization": f"Bearer {token}"}
        self._history_limit = get_search_history_limit()
        self._client = httpx.AsyncClient(timeout=30.0)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def __aenter__(self) -> UpstashRedisStorage:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # REST transport
    # ------------------------------------------------------------------

    async def _command(self, *args: str | int) -> Any:
        """Run one Redis command and return its ``result``.

        Raises:
            RuntimeError: If Upstash answers with an error payload.
            httpx.HTTPStatusError: On any other non-2xx response.
        """
        command = [str(arg) for arg in args]
        resp = await self._client.post(self._url, headers=self._headers, json=command)
        try:
            payload = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise RuntimeError(f"Upstash {command[0]} returned a non-JSON response") from None
        if isinstance(payload, dict) and payload.get("error"):
            raise RuntimeError(f"Upstash {command[0]} failed: {payload['error']}")
        resp.raise_for_status()
        logger.debug("Upstash %s ok", command[0])
        return payload.get("result") if isinstance(payload, dict) else None

    async def _get_model(self, key: str, model: type[ModelT]) -> ModelT | None:
        raw = await self._command("GET", key)
        return None if raw is None else model.model_validate_json(raw)

    async def _set_model(self, key: str, value: BaseModel) -> None:
        await self._command("SET", key, value.model_dump_json(by_alias=True))

    async def _keys(self, pattern: str) -> list[str]:
        return list(await self._command("KEYS", pattern) or [])

    async def _keys_under(self, prefix: str) -> list[str]:
        """Every key starting with the literal *prefix*."""
        return await self._keys(f"{escape_glob(prefix)}*")

    async def _get_all_models(self, prefix: str, model: type[ModelT]) -> dict[str, ModelT]:
        """Load every key under *prefix*, keyed by the part after it."""
        keys = await self._keys_under(prefix)
        if not keys:
            return {}
        values = await self._command("MGET", *keys)
        return {
            key[len(prefix) :]: model.model_validate_json(raw)
            for key, raw in zip(keys, values, strict=True)
            if raw is not None
        }

    # ------------------------------------------------------------------
    # Key helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _pr_key(user_name: str, key: str) -> str:
        return f"u:{user_name}:pr:{key}"

    @staticmethod
    def _fav_key(user_name: str, key: str) -> str:
        return f"u:{user_name}:fav:{key}"

    @staticmethod
    def _skip_key(user_name: str, source: str, id: str) -> str:  # noqa: A002
        return f"u:{user_name}:skip:{generate_storage_key(source, id)}"

    @staticmethod
    def _pwd_key(user_name: str) -> str:
        return f"{USER_PREFIX}{user_name}{PASSWORD_SUFFIX}"

    @staticmethod
    def _sh_key(user_name: str) -> str:
        return f"u:{user_name}:sh"

    # ------------------------------------------------------------------
    # Play records
    # ------------------------------------------------------------------

    async def get_play_record(self, user_name: str, key: str) -> PlayRecord | None:
        return await self._get_model(self._pr_key(user_name, key), PlayRecord)

    async def set_play_record(self, user_name: str, key: str, record: PlayRecord) -> None:
        await self._set_model(self._pr_key(user_name, key), record)

    async def get_all_play_records(self, user_name: str) -> dict[str, PlayRecord]:
        return await self._get_all_models(self._pr_key(user_name, ""), PlayRecord)

    async def delete_play_record(self, user_name: str, key: str) -> None:
        await self._command("DEL", self._pr_key(user_name, key))

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def get_favorite(self, user_name: str, key: str) -> Favorite | None:
        return await self._get_model(self._fav_key(user_name, key), Favorite)

    async def set_favorite(self, user_name: str, key: str, favorite: Favorite) -> None:
        await self._set_model(self._fav_key(user_name, key), favorite)

    async def get_all_favorites(self, user_name: str) -> dict[str, Favorite]:
        return await self._get_all_models(self._fav_key(user_name, ""), Favorite)

    async def delete_favorite(self, user_name: str, key: str) -> None:
        await self._command("DEL", self._fav_key(user_name, key))

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def register_user(self, user_name: str, password: str) -> None:
        # NX: SET answers null when the key already exists
        created = await self._command("SET", self._pwd_key(user_name), password, "NX")
        if created is None:
            raise ValueError(f"User already exists: {user_name}")
        logger.info("Registered user %s", user_name)

    async def verify_user(self, user_name: str, password: str) -> bool:
        stored = await self._command("GET", self._pwd_key(user_name))
        return stored is not None and stored == password

    async def check_user_exist(self, user_name: str) -> bool:
        return bool(await self._command("EXISTS", self._pwd_key(user_name)))

    async def change_password(self, user_name: str, new_password: str) -> None:
        await self._command("SET", self._pwd_key(user_name), new_password)

    async def delete_user(self, user_name: str) -> None:
        keys = [self._pwd_key(user_name), self._sh_key(user_name)]
        for kind in ("pr", "fav", "skip"):
            keys.extend(await self._keys_under(f"u:{user_name}:{kind}:"))
        await self._command("DEL", *keys)
        logger.info("Deleted user %s (%d keys)", user_name, len(keys))

    async def get_all_users(self) -> list[str]:
        keys = await self._keys(f"{USER_PREFIX}*{PASSWORD_SUFFIX}")
        return [key[len(USER_PREFIX) : -len(PASSWORD_SUFFIX)] for key in keys]

    # ------------------------------------------------------------------
    # Search history
    # ------------------------------------------------------------------

    async def get_search_history(self, user_name: str) -> list[str]:
        return list(await self._command("LRANGE", self._sh_key(user_name), 0, -1) or [])

    async def add_search_history(self, user_name: str, keyword: str) -> None:
        key = self._sh_key(user_name)
        await self._command("LREM", key, 0, keyword)
        await self._command("LPUSH", key, keyword)
        await self._command("LTRIM", key, 0, self._history_limit - 1)

    async def delete_search_history(self, user_name: str, keyword: str | None = None) -> None:
        key = self._sh_key(user_name)
        if keyword is None:
            await self._command("DEL", key)
        else:
            await self._command("LREM", key, 0, keyword)

    # ------------------------------------------------------------------
    # Admin config
    # ------------------------------------------------------------------

    async def get_admin_config(self) -> AdminConfig | None:
        return await self._get_model(ADMIN_CONFIG_KEY, AdminConfig)

    async def set_admin_config(self, config: AdminConfig) -> None:
        await self._set_model(ADMIN_CONFIG_KEY, config)

    # ------------------------------------------------------------------
    # Skip configs
    # ------------------------------------------------------------------

    async def get_skip_config(self, user_name: str, source: str, id: str) -> SkipConfig | None:  # noqa: A002
        return await self._get_model(self._skip_key(user_name, source, id), SkipConfig)

    async def set_skip_config(self, user_name: str, source: str, id: str, config: SkipConfig) -> None:  # noqa: A002
        await self._set_model(self._skip_key(user_name, source, id), config)

    async def delete_skip_config(self, user_name: str, source: str, id: str) -> None:  # noqa: A002
        await self._command("DEL", self._skip_key(user_name, source, id))

    async def get_all_skip_configs(self, user_name: str) -> dict[str, SkipConfig]:
        return await self._get_all_models(f"u:{user_name}:skip:", SkipConfig)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear_all_data(self) -> None:
        """Delete every user and the admin config."""
        users = await self.get_all_users()
        for user_name in users:
            await self.delete_user(user_name)
        await self._command("DEL", ADMIN_CONFIG_KEY)
        logger.warning("Cleared all data (%d users)", len(users))
