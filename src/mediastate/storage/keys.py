# SPDX-License-Identifier: MIT
"""Composite storage keys for play records and favorites.

A key is ``f"{source}+{id}"``. Neither part is escaped, so a *source*
containing ``+`` cannot be recovered unambiguously; sources are short
identifiers that never contain the delimiter. Skip configs do not use
these keys.
"""

KEY_DELIMITER = "+"


def generate_storage_key(source: str, id: str) -> str:  # noqa: A002
    """Compose the key addressing one title of one source."""
    return f"{source}{KEY_DELIMITER}{id}"


def split_storage_key(key: str) -> tuple[str, str]:
    """Split a composite key on the first delimiter into ``(source, id)``.

    Raises:
        ValueError: If *key* contains no delimiter.
    """
    source, sep, id_ = key.partition(KEY_DELIMITER)
    if not sep:
        raise ValueError(f"Invalid storage key (missing '{KEY_DELIMITER}'): {key!r}")
    return source, id_
