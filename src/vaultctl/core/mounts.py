"""Time-bounded cache of the Vault mount table."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from vaultctl.vault.base import MountInfo

logger = logging.getLogger(__name__)

# Mount tables change rarely; refresh at most once per minute
MOUNT_REFRESH = 60.0


class MountCache:
    """Caches the result of a "list mounts" call for a TTL window.

    A failed refresh propagates its error and leaves the previous mapping in
    place; the timestamp is not touched, so the next call retries.
    """

    def __init__(
        self,
        fetch: Callable[[], dict[str, MountInfo]],
        ttl: float = MOUNT_REFRESH,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch = fetch
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._mounts: dict[str, MountInfo] = {}
        self._refreshed: float | None = None

    def _expired(self) -> bool:
        with self._lock:
            if self._refreshed is None:
                return True
            return self._clock() - self._refreshed > self.ttl

    def mounts(self) -> dict[str, MountInfo]:
        """Return the mount table, refreshing it when the TTL has passed."""
        if self._expired():
            logger.debug("mounts: refreshing mount table")
            mounts = self._fetch()
            with self._lock:
                self._mounts = dict(mounts)
                self._refreshed = self._clock()
        return self.snapshot()

    def snapshot(self) -> dict[str, MountInfo]:
        """Return the cached mount table without contacting Vault."""
        with self._lock:
            return dict(self._mounts)

    def invalidate(self) -> None:
        """Force a refresh on the next call to mounts()."""
        with self._lock:
            self._refreshed = None
