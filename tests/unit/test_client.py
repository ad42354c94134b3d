"""Tests for vaultctl.core.client - the filesystem view of Vault."""

from __future__ import annotations

import pytest

from vaultctl.core.client import Client, is_dir
from vaultctl.core.entries import MountEntry, RootEntry, SecretEntry, entry_kind, filemode
from vaultctl.errors import EntryNotFoundError, GlobError, ServerError


class TestStat:
    """Tests for Client.stat."""

    def test_root_needs_no_remote_call(self, client, store):
        """Test root needs no remote call."""
        entry = client.stat("/")
        assert isinstance(entry, RootEntry)
        assert entry.is_dir
        assert store.calls == 0

    def test_leaf_secret(self, client):
        """Test leaf secret."""
        entry = client.stat("/secret/app/db")
        assert isinstance(entry, SecretEntry)
        assert entry.name == "/secret/app/db"
        assert entry.key == "db"
        assert entry.data == {"username": "app", "password": "s3cret"}
        assert not entry.is_dir
        assert entry_kind(entry) == "secret"

    def test_relative_to_working_path(self, client):
        """Test relative to working path."""
        client.set_path("/secret/app")
        assert client.stat("db").name == "/secret/app/db"

    def test_listable_prefix(self, client):
        """Test listable prefix."""
        entry = client.stat("/secret/app")
        assert isinstance(entry, SecretEntry)
        assert entry.name == "/secret/app/"
        assert entry.is_dir
        assert entry_kind(entry) == "dir"

    def test_mount(self, client):
        """Test mount."""
        entry = client.stat("/secret")
        assert isinstance(entry, MountEntry)
        assert entry.name == "/secret"
        assert entry.mount.type == "kv"
        assert entry_kind(entry) == "mount"

    def test_mount_below_root_skips_list(self, client, store):
        """Test mount below root skips list."""
        client.stat("/secret")
        assert store.lists == []

    def test_intermediate_directory_of_nested_mount(self, client):
        """Test intermediate directory of nested mount."""
        entry = client.stat("/team")
        assert isinstance(entry, MountEntry)
        assert entry.name == "/team/"
        assert entry.is_dir

    def test_not_found(self, client):
        """Test not found."""
        with pytest.raises(EntryNotFoundError, match="/secret/nope: not found"):
            client.stat("/secret/nope")

    def test_permission_denied_read_is_not_fatal(self, client, store):
        """Test permission denied read is not fatal."""
        store.denied.add("secret/app")
        entry = client.stat("/secret/app")
        assert entry.is_dir

    def test_permission_denied_mounts_uses_cached_table(self, client, store):
        """Test permission denied mounts uses cached table."""
        client.stat("/secret")
        client._mounts.invalidate()
        store.mounts_denied = True
        assert isinstance(client.stat("/secret"), MountEntry)

    def test_other_server_errors_propagate(self, client, store):
        """Test other server errors propagate."""
        def broken(path):
            raise ServerError("secret/app/db: internal error")

        store.read_secret = broken
        with pytest.raises(ServerError):
            client.stat("/secret/app/db")


class TestReadDir:
    """Tests for Client.read_dir."""

    def test_root_lists_kv_and_generic_mounts(self, client):
        """Test root lists kv and generic mounts."""
        names = sorted(entry.name for entry in client.read_dir("/"))
        # sys/ is a system mount and not shown
        assert names == ["/secret", "/team"]

    def test_mount_lists_secrets_and_prefixes(self, client):
        """Test mount lists secrets and prefixes."""
        entries = {entry.name: entry for entry in client.read_dir("/secret")}
        assert sorted(entries) == ["/secret/app", "/secret/foo"]
        assert all(entry.is_dir for entry in entries.values())

    def test_prefix_lists_leaves(self, client):
        """Test prefix lists leaves."""
        entries = {entry.name: entry for entry in client.read_dir("/secret/app")}
        assert sorted(entries) == ["/secret/app/api", "/secret/app/db", "/secret/app/settings"]
        assert not entries["/secret/app/db"].is_dir

    def test_nested_mount_shown_in_parent(self, client):
        """Test nested mount shown in parent."""
        names = [entry.name for entry in client.read_dir("/team")]
        assert names == ["/team/kv"]

    def test_empty_directory(self, client):
        """Test empty directory."""
        assert client.read_dir("/secret/nope") == []

    def test_custom_mount_types(self, store):
        """Test custom mount types."""
        client = Client(store, mount_types=["system"])
        assert [entry.name for entry in client.read_dir("/")] == ["/sys"]


class TestGlob:
    """Tests for Client.glob."""

    def test_without_wildcards_is_stat(self, client):
        """Test without wildcards is stat."""
        assert client.glob("/secret/app/db") == [client.stat("/secret/app/db")]

    def test_without_wildcards_missing_raises(self, client):
        """Test without wildcards missing raises."""
        with pytest.raises(EntryNotFoundError):
            client.glob("/secret/app/missing")

    def test_directory_globbing_not_supported(self, client, store):
        """Test directory globbing not supported."""
        with pytest.raises(GlobError, match="directory globbing not supported"):
            client.glob("/sec*/app/db")
        assert store.calls == 0

    def test_star(self, client):
        """Test star."""
        names = sorted(entry.name for entry in client.glob("/secret/app/*"))
        assert names == ["/secret/app/api", "/secret/app/db", "/secret/app/settings"]

    def test_question_mark(self, client):
        """Test question mark."""
        names = [entry.name for entry in client.glob("/secret/app/d?")]
        assert names == ["/secret/app/db"]

    def test_nested_pattern_is_fully_anchored(self, client):
        """Test nested pattern is fully anchored."""
        assert client.glob("/secret/app/?") == []

    def test_root_pattern_is_prefix_anchored(self, client):
        """Test root pattern is prefix anchored."""
        names = [entry.name for entry in client.glob("/se?")]
        assert names == ["/secret"]

    def test_relative_pattern(self, client):
        """Test relative pattern."""
        client.set_path("/secret")
        names = sorted(entry.name for entry in client.glob("a*"))
        assert names == ["/secret/app"]


class TestComplete:
    """Tests for path completion."""

    def test_mount_at_root(self, client):
        """Test mount at root."""
        assert client.complete("sec") == ["secret/"]

    def test_children_of_directory(self, client):
        """Test children of directory."""
        assert sorted(client.complete("secret/app/")) == [
            "secret/app/api",
            "secret/app/db",
            "secret/app/settings",
        ]

    def test_absolute_text_stays_absolute(self, client):
        """Test absolute text stays absolute."""
        assert client.complete("/secret/app/d") == ["/secret/app/db"]

    def test_relative_to_working_path(self, client):
        """Test relative to working path."""
        client.set_path("/secret/app")
        assert client.complete("d") == ["db"]

    def test_directories_only(self, client):
        """Test directories only."""
        client.set_path("/secret")
        assert sorted(client.complete("", is_dir)) == ["app/", "foo/"]

    def test_errors_give_no_suggestions(self, client):
        """Test errors give no suggestions."""
        assert client.complete("/s*/x") == []


class TestEntries:
    """Tests for entry modes."""

    def test_filemode(self, client):
        """Test filemode."""
        assert filemode(client.stat("/")) == "drwxr-xr-x"
        assert filemode(client.stat("/secret/app/db")) == "-rw-r--r--"


class TestSiblingMounts:
    """Mounts sharing an intermediate segment."""

    @pytest.fixture
    def client(self, make_store):
        return Client(make_store(mounts={"team/a/": "kv", "team/b/": "kv"}))

    def test_read_dir_lists_shared_segment_once(self, client):
        """Test two mounts below /team produce one /team entry."""
        assert [entry.name for entry in client.read_dir("/")] == ["/team"]

    def test_both_mounts_listed_below_segment(self, client):
        """Test the shared segment lists each mount."""
        assert sorted(entry.name for entry in client.read_dir("/team")) == ["/team/a", "/team/b"]

    def test_glob_and_complete_have_no_duplicates(self, client):
        """Test glob and completion offer the shared segment once."""
        assert [entry.name for entry in client.glob("/*")] == ["/team"]
        assert client.complete("t") == ["team/"]
