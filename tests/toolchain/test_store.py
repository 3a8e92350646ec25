"""
Tests for the installation store.
"""

import os
import sys

import pytest

from zvm.core.exceptions import Busy, NotInstalled
from zvm.core.locking import LockManager
from zvm.toolchain.store import Store, is_version_name


class TestIsVersionName:
    """Test is_version_name function."""

    @pytest.mark.parametrize("name", ["0.11.0", "master", "mach-latest", "0.12.0-dev.1+abc"])
    def test_valid(self, name):
        assert is_version_name(name)

    @pytest.mark.parametrize(
        "name", ["", ".staging", ".locks", "..", "../etc", "a/b", "a\\b", "bin", "self"]
    )
    def test_invalid(self, name):
        assert not is_version_name(name)


class TestStorePaths:
    """Test Store addressing."""

    def test_path_for(self, store, zvm_root):
        assert store.path_for("0.11.0") == zvm_root / "0.11.0"

    def test_path_for_does_not_touch_disk(self, store, zvm_root):
        store.path_for("0.11.0")

        assert not (zvm_root / "0.11.0").exists()

    def test_path_for_rejects_escapes(self, store):
        with pytest.raises(ValueError, match="Invalid version name"):
            store.path_for("../outside")

    def test_binary_path(self, store, zvm_root):
        assert store.binary_path("0.11.0") == zvm_root / "0.11.0" / "zig"

    def test_staging_paths_are_unique(self, store):
        first = store.new_staging_path("0.11.0")
        second = store.new_staging_path("0.11.0")

        assert first != second
        assert first.parent == store.staging_dir
        assert first.name.startswith("0.11.0.")


class TestListInstalled:
    """Test Store.list_installed."""

    def test_empty_root(self, store):
        assert store.list_installed() == []

    def test_missing_root(self, tmp_path, linux_platform):
        store = Store(
            tmp_path / "missing",
            platform=linux_platform,
            lock_manager=LockManager(tmp_path / "locks"),
        )

        assert store.list_installed() == []

    def test_lists_version_directories_sorted(self, store, fake_install):
        fake_install("master")
        fake_install("0.11.0")
        fake_install("0.10.1")

        assert store.list_installed() == ["0.10.1", "0.11.0", "master"]

    def test_ignores_bookkeeping_entries(self, store, zvm_root, fake_install):
        fake_install("0.11.0")
        (zvm_root / ".staging" / "0.12.0.abc").mkdir(parents=True)
        (zvm_root / "self").mkdir()
        (zvm_root / "settings.yaml").write_text("")
        (zvm_root / "zig-linux-x86_64-0.11.0.tar.xz").write_bytes(b"")

        assert store.list_installed() == ["0.11.0"]
        assert store.is_installed("0.11.0")
        assert not store.is_installed("self")
        assert not store.is_installed("0.12.0")

    @pytest.mark.skipif(sys.platform == "win32", reason="symlink privileges")
    def test_ignores_active_link(self, store, zvm_root, fake_install):
        target = fake_install("0.11.0")
        os.symlink(target, zvm_root / "bin", target_is_directory=True)

        assert store.list_installed() == ["0.11.0"]


class TestRemove:
    """Test Store.remove."""

    def test_remove_installed(self, store, fake_install):
        fake_install("0.11.0")

        store.remove("0.11.0")

        assert not store.is_installed("0.11.0")
        assert store.list_installed() == []

    def test_remove_twice(self, store, fake_install):
        fake_install("0.11.0")
        store.remove("0.11.0")

        with pytest.raises(NotInstalled) as exc_info:
            store.remove("0.11.0")

        assert exc_info.value.version == "0.11.0"

    def test_remove_leaves_other_versions(self, store, fake_install):
        fake_install("0.11.0")
        fake_install("0.10.1")

        store.remove("0.11.0")

        assert store.list_installed() == ["0.10.1"]

    @pytest.mark.skipif(sys.platform == "win32", reason="symlink privileges")
    def test_symlinked_entry_is_not_installed(self, store, zvm_root, tmp_path):
        outside = tmp_path / "elsewhere"
        outside.mkdir()
        (zvm_root / "0.10.0").symlink_to(outside, target_is_directory=True)

        assert store.list_installed() == []
        assert not store.is_installed("0.10.0")
        with pytest.raises(NotInstalled):
            store.remove("0.10.0")

        assert outside.is_dir()

    def test_remove_while_installing(self, store, fake_install):
        fake_install("master")

        with store.lock_manager.version_lock("master", timeout=1):
            with pytest.raises(Busy) as exc_info:
                store.remove("master")

        assert exc_info.value.version == "master"
        assert store.is_installed("master")


class TestClean:
    """Test Store.clean."""

    def test_nothing_to_clean(self, store, fake_install):
        fake_install("0.11.0")

        assert store.clean() == []
        assert store.list_installed() == ["0.11.0"]

    def test_removes_abandoned_staging_and_archives(self, store, zvm_root, fake_install):
        fake_install("0.11.0")
        abandoned = store.new_staging_path("0.10.1")
        (abandoned / "extract").mkdir(parents=True)
        (abandoned / "archive.tar.xz").write_bytes(b"partial")
        (zvm_root / "zig-linux-x86_64-0.9.0.tar.xz").write_bytes(b"old download")

        removed = store.clean()

        assert removed == [
            f".staging/{abandoned.name}",
            "zig-linux-x86_64-0.9.0.tar.xz",
        ]
        assert list(store.staging_dir.iterdir()) == []
        assert not (zvm_root / "zig-linux-x86_64-0.9.0.tar.xz").exists()
        assert store.list_installed() == ["0.11.0"]

    def test_keeps_staging_of_running_install(self, store):
        running = store.new_staging_path("master")
        running.mkdir(parents=True)

        with store.lock_manager.version_lock("master", timeout=1):
            removed = store.clean()

        assert removed == []
        assert running.exists()

    def test_keeps_settings(self, store, zvm_root):
        (zvm_root / "settings.yaml").write_text("use_color: false\n")

        store.clean()

        assert (zvm_root / "settings.yaml").exists()
