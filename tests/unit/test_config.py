# SPDX-License-Identifier: MIT
"""Unit tests for configuration management."""

import logging

import pytest

from mediastate.config import (
    DEFAULT_SEARCH_HISTORY_LIMIT,
    get_data_path,
    get_search_history_limit,
    get_storage_type,
    get_upstash_credentials,
    parse_storage_type,
)


@pytest.mark.unit
class TestParseStorageType:
    @pytest.mark.parametrize("value", ["localstorage", "redis", "upstash", "kvrocks"])
    def test_known_values(self, value):
        assert parse_storage_type(value) == value

    def test_case_and_whitespace_normalised(self):
        assert parse_storage_type("  UpStash \n") == "upstash"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_unset_defaults_to_local(self, value):
        assert parse_storage_type(value) == "localstorage"

    def test_unknown_defaults_to_local_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mediastate"):
            assert parse_storage_type("mongodb") == "localstorage"
        assert "mongodb" in caplog.text


@pytest.mark.unit
class TestGetStorageType:
    def test_reads_storage_type(self, monkeypatch):
        monkeypatch.setenv("STORAGE_TYPE", "redis")
        assert get_storage_type() == "redis"

    def test_legacy_alias(self, monkeypatch):
        monkeypatch.delenv("STORAGE_TYPE", raising=False)
        monkeypatch.setenv("NEXT_PUBLIC_STORAGE_TYPE", "kvrocks")
        assert get_storage_type() == "kvrocks"

    def test_storage_type_takes_precedence(self, monkeypatch):
        monkeypatch.setenv("STORAGE_TYPE", "upstash")
        monkeypatch.setenv("NEXT_PUBLIC_STORAGE_TYPE", "redis")
        assert get_storage_type() == "upstash"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("STORAGE_TYPE", raising=False)
        monkeypatch.delenv("NEXT_PUBLIC_STORAGE_TYPE", raising=False)
        assert get_storage_type() == "localstorage"

    def test_cached(self, monkeypatch):
        monkeypatch.setenv("STORAGE_TYPE", "upstash")
        assert get_storage_type() == "upstash"
        monkeypatch.setenv("STORAGE_TYPE", "redis")
        assert get_storage_type() == "upstash"


@pytest.mark.unit
class TestUpstashCredentials:
    def test_valid(self, monkeypatch):
        monkeypatch.setenv("UPSTASH_URL", "https://eu1.upstash.io/")
        monkeypatch.setenv("UPSTASH_TOKEN", " tok ")
        assert get_upstash_credentials() == ("https://eu1.upstash.io", "tok")

    def test_scheme_added(self, monkeypatch):
        monkeypatch.setenv("UPSTASH_URL", "eu1.upstash.io")
        monkeypatch.setenv("UPSTASH_TOKEN", "tok")
        assert get_upstash_credentials()[0] == "https://eu1.upstash.io"

    def test_missing_all_listed(self, monkeypatch):
        monkeypatch.delenv("UPSTASH_URL", raising=False)
        monkeypatch.setenv("UPSTASH_TOKEN", "   ")
        with pytest.raises(RuntimeError, match="UPSTASH_URL") as exc_info:
            get_upstash_credentials()
        assert "UPSTASH_TOKEN" in str(exc_info.value)


@pytest.mark.unit
class TestSearchHistoryLimit:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("SEARCH_HISTORY_LIMIT", raising=False)
        assert get_search_history_limit() == DEFAULT_SEARCH_HISTORY_LIMIT

    def test_custom(self, monkeypatch):
        monkeypatch.setenv("SEARCH_HISTORY_LIMIT", "7")
        assert get_search_history_limit() == 7

    @pytest.mark.parametrize("value", ["abc", "0", "-3"])
    def test_invalid(self, monkeypatch, value):
        monkeypatch.setenv("SEARCH_HISTORY_LIMIT", value)
        with pytest.raises(RuntimeError, match="SEARCH_HISTORY_LIMIT"):
            get_search_history_limit()


@pytest.mark.unit
class TestDataPath:
    def test_unset(self, monkeypatch):
        monkeypatch.delenv("MEDIASTATE_DATA_PATH", raising=False)
        assert get_data_path() is None

    def test_file_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MEDIASTATE_DATA_PATH", str(tmp_path / "state.json"))
        assert get_data_path() == (tmp_path / "state.json").resolve()

    def test_directory_rejected(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MEDIASTATE_DATA_PATH", str(tmp_path))
        with pytest.raises(RuntimeError, match="directory"):
            get_data_path()

    def test_missing_parent_rejected(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MEDIASTATE_DATA_PATH", str(tmp_path / "nope" / "state.json"))
        with pytest.raises(RuntimeError, match="parent directory"):
            get_data_path()
