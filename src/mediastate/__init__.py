# SPDX-License-Identifier: MIT
"""mediastate - per-user media state over pluggable key-value storage.

The default facade lives at :data:`mediastate.db.db`; the package itself only
re-exports types so ``mediastate.db`` stays the submodule.
"""

from .db import DbManager
from .exceptions import StorageNotConfiguredError, UnsupportedOperationError
from .models import AdminConfig, Favorite, PlayRecord, SkipConfig

__all__ = [
    "AdminConfig",
    "DbManager",
    "Favorite",
    "PlayRecord",
    "SkipConfig",
    "StorageNotConfiguredError",
    "UnsupportedOperationError",
]
