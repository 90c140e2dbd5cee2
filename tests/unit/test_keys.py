# SPDX-License-Identifier: MIT
"""Unit tests for composite storage keys."""

import pytest

from mediastate.storage.keys import generate_storage_key, split_storage_key


@pytest.mark.unit
class TestGenerateStorageKey:
    def test_joins_with_plus(self):
        assert generate_storage_key("a", "b") == "a+b"

    def test_realistic_ids(self):
        assert generate_storage_key("src1", "42") == "src1+42"

    def test_empty_parts(self):
        assert generate_storage_key("", "") == "+"

    def test_no_escaping_of_delimiter_in_id(self):
        assert generate_storage_key("src", "a+b") == "src+a+b"

    def test_deterministic(self):
        assert generate_storage_key("x", "y") == generate_storage_key("x", "y")


@pytest.mark.unit
class TestSplitStorageKey:
    @pytest.mark.parametrize(
        ("source", "id_"),
        [("src1", "42"), ("douban", "tt0245429"), ("src", "a+b"), ("src", "")],
    )
    def test_recovers_parts_when_source_has_no_plus(self, source, id_):
        assert split_storage_key(generate_storage_key(source, id_)) == (source, id_)

    def test_ambiguous_when_source_contains_plus(self):
        key = generate_storage_key("a+b", "c")
        assert split_storage_key(key) == ("a", "b+c")

    def test_missing_delimiter_raises(self):
        with pytest.raises(ValueError, match="missing"):
            split_storage_key("nodelimiter")
