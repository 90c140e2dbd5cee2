# SPDX-License-Identifier: MIT
"""Shared pytest fixtures for mediastate tests."""

import pytest

from mediastate.config import get_storage_type
from mediastate.models import Favorite, PlayRecord
from mediastate.storage.local import LocalStorage
from mediastate.storage.provider import StorageProvider


@pytest.fixture(autouse=True)
def clear_storage_type_cache():
    """Clear get_storage_type() cache so env changes are seen by each test."""
    get_storage_type.cache_clear()
    yield
    get_storage_type.cache_clear()


class RequiredOnlyStorage:
    """In-memory backend with the required operations and no optional capability."""

    def __init__(self) -> None:
        self.play_records: dict[tuple[str, str], PlayRecord] = {}
        self.favorites: dict[tuple[str, str], Favorite] = {}
        self.users: dict[str, str] = {}
        self.history: dict[str, list[str]] = {}

    async def get_play_record(self, user_name, key):
        return self.play_records.get((user_name, key))

    async def set_play_record(self, user_name, key, record):
        self.play_records[(user_name, key)] = record

    async def get_all_play_records(self, user_name):
        return {k: v for (u, k), v in self.play_records.items() if u == user_name}

    async def delete_play_record(self, user_name, key):
        self.play_records.pop((user_name, key), None)

    async def get_favorite(self, user_name, key):
        return self.favorites.get((user_name, key))

    async def set_favorite(self, user_name, key, favorite):
        self.favorites[(user_name, key)] = favorite

    async def get_all_favorites(self, user_name):
        return {k: v for (u, k), v in self.favorites.items() if u == user_name}

    async def delete_favorite(self, user_name, key):
        self.favorites.pop((user_name, key), None)

    async def register_user(self, user_name, password):
        if user_name in self.users:
            raise ValueError(f"User already exists: {user_name}")
        self.users[user_name] = password

    async def verify_user(self, user_name, password):
        return self.users.get(user_name) == password

    async def check_user_exist(self, user_name):
        return user_name in self.users

    async def change_password(self, user_name, new_password):
        self.users[user_name] = new_password

    async def delete_user(self, user_name):
        self.users.pop(user_name, None)

    async def get_search_history(self, user_name):
        return list(self.history.get(user_name, []))

    async def add_search_history(self, user_name, keyword):
        self.history.setdefault(user_name, []).insert(0, keyword)

    async def delete_search_history(self, user_name, keyword=None):
        if keyword is None:
            self.history.pop(user_name, None)
        else:
            self.history[user_name] = [k for k in self.history.get(user_name, []) if k != keyword]


def _provider_for(backend) -> StorageProvider:
    async def factory():
        return backend

    return StorageProvider(factory=factory)


@pytest.fixture
def make_provider():
    """Factory for providers that always resolve to the given backend."""
    return _provider_for


@pytest.fixture
def required_only_storage() -> RequiredOnlyStorage:
    return RequiredOnlyStorage()


@pytest.fixture
def no_remote_provider() -> StorageProvider:
    """Provider behaving like STORAGE_TYPE=localstorage."""
    return _provider_for(None)


@pytest.fixture
def memory_storage() -> LocalStorage:
    """Local backend that keeps data in memory only."""
    return LocalStorage(path=None, history_limit=5)


@pytest.fixture
def play_record() -> PlayRecord:
    return PlayRecord(
        title="Spirited Away",
        source_name="Source One",
        cover="https://img.example.com/sa.jpg",
        year="2001",
        index=1,
        total_episodes=1,
        play_time=1234.5,
        total_time=7500,
        save_time=1700000000000,
        search_title="spirited away",
    )


@pytest.fixture
def favorite() -> Favorite:
    return Favorite(
        source_name="Source One",
        total_episodes=24,
        title="Cowboy Bebop",
        year="1998",
        cover="https://img.example.com/cb.jpg",
        save_time=1700000000000,
        search_title="cowboy bebop",
        origin="vod",
    )
