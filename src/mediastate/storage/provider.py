# SPDX-License-Identifier: MIT
"""Lazily constructed, shared storage backend.

:class:`StorageProvider` keeps the construction task itself, not just its
result, so every caller (concurrent or later) awaits the same construction.
A failed construction is kept too: callers keep seeing the same error until
:meth:`StorageProvider.reset` is called.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .factory import create_storage
from .protocol import StorageBackend

logger = logging.getLogger("mediastate")

StorageFactory = Callable[[], Awaitable[StorageBackend | None]]


class StorageProvider:
    """Owns at most one backend for its lifetime.

    Args:
        factory: Coroutine function building the backend. Defaults to
            :func:`~mediastate.storage.factory.create_storage`.
    """

    def __init__(self, factory: StorageFactory | None = None) -> None:
        self._factory = factory or create_storage
        self._task: asyncio.Task[StorageBackend | None] | None = None

    async def get(self) -> StorageBackend | None:
        """Return the backend, starting construction on the first call."""
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
        # Shielded so one cancelled caller does not cancel the shared construction
        return await asyncio.shield(self._task)

    @property
    def started(self) -> bool:
        return self._task is not None

    def reset(self) -> None:
        """Forget the memoized construction (successful or failed)."""
        self._task = None

    async def aclose(self) -> None:
        """Close the backend if one was built and it holds resources."""
        task, self._task = self._task, None
        if task is None or not task.done() or task.cancelled() or task.exception() is not None:
            return
        backend = task.result()
        aclose = getattr(backend, "aclose", None)
        if aclose is not None:
            await aclose()
            logger.debug("Storage backend closed")


_default_provider = StorageProvider()


def get_provider() -> StorageProvider:
    """Return the process-wide default provider."""
    return _default_provider


async def get_storage() -> StorageBackend | None:
    """Return the process-wide backend (see :class:`StorageProvider`)."""
    return await _default_provider.get()
