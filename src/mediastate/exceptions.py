# SPDX-License-Identifier: MIT
"""Errors raised by the mediastate facade itself.

Backend errors are never wrapped; these cover the two cases the facade
decides on its own.
"""


class UnsupportedOperationError(RuntimeError):
    """The active backend does not implement a capability the caller requires."""


class StorageNotConfiguredError(RuntimeError):
    """No backend is available: local storage was selected but none was injected."""
