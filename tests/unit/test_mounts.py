"""Tests for vaultctl.core.mounts."""

from __future__ import annotations

import pytest

from vaultctl.core.mounts import MOUNT_REFRESH, MountCache
from vaultctl.errors import ServerError
from vaultctl.vault.base import MountInfo


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestMountCache:
    """Tests for the mount table cache."""

    def setup_method(self):
        self.clock = FakeClock()
        self.calls = 0
        self.fail = False

    def fetch(self):
        self.calls += 1
        if self.fail:
            raise ServerError("sys/mounts: connection refused")
        return {"secret/": MountInfo(type="kv"), f"gen{self.calls}/": MountInfo(type="generic")}

    def make_cache(self):
        return MountCache(self.fetch, clock=self.clock)

    def test_default_ttl_is_one_minute(self):
        """Test default ttl is one minute."""
        assert MOUNT_REFRESH == 60.0
        assert self.make_cache().ttl == 60.0

    def test_first_call_fetches(self):
        """Test first call fetches."""
        cache = self.make_cache()
        assert "secret/" in cache.mounts()
        assert self.calls == 1

    def test_cached_within_ttl(self):
        """Test cached within ttl."""
        cache = self.make_cache()
        cache.mounts()
        self.clock.now += 59
        cache.mounts()
        assert self.calls == 1

    def test_refreshes_after_ttl(self):
        """Test refreshes after ttl."""
        cache = self.make_cache()
        cache.mounts()
        self.clock.now += 61
        mounts = cache.mounts()
        assert self.calls == 2
        assert "gen2/" in mounts

    def test_failed_refresh_keeps_previous_table(self):
        """Test failed refresh keeps previous table."""
        cache = self.make_cache()
        cache.mounts()
        self.clock.now += 61
        self.fail = True

        with pytest.raises(ServerError):
            cache.mounts()
        assert "gen1/" in cache.snapshot()

        # The timestamp was not updated, so the next call retries
        self.fail = False
        assert "gen3/" in cache.mounts()

    def test_invalidate_forces_refresh(self):
        """Test invalidate forces refresh."""
        cache = self.make_cache()
        cache.mounts()
        cache.invalidate()
        cache.mounts()
        assert self.calls == 2

    def test_snapshot_is_a_copy(self):
        """Test snapshot is a copy."""
        cache = self.make_cache()
        cache.mounts().clear()
        assert cache.snapshot()
