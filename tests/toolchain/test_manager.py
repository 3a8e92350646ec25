"""
Tests for the VersionManager facade.
"""

import hashlib
import sys
from unittest.mock import patch

import pytest
import responses

from zvm.config.settings import MACH_VERSION_MAP_URL, Settings
from zvm.core.exceptions import NotInstalled, NoVersionSpecified
from zvm.toolchain.installer import InstallResult
from zvm.toolchain.manager import VersionManager

symlinks_required = pytest.mark.skipif(
    sys.platform == "win32", reason="symlink privileges"
)

CATALOG_URL = "https://ziglang.org/download/index.json"
ZIG_URL = "https://ziglang.org/download/0.11.0/zig-linux-x86_64-0.11.0.tar.xz"
MASTER_BUILD = "0.12.0-dev.2059+42389cb9c"


@pytest.fixture
def manager(zvm_root, linux_platform):
    return VersionManager(Settings(), zvm_root, platform=linux_platform, lock_timeout=1)


@pytest.fixture
def catalog_document():
    def _document(data):
        descriptor = {
            "tarball": ZIG_URL,
            "shasum": hashlib.sha256(data).hexdigest(),
            "size": str(len(data)),
        }
        return {
            "master": {"version": MASTER_BUILD, "x86_64-linux": dict(descriptor)},
            "0.11.0": {"x86_64-linux": descriptor},
            "0.10.1": {"x86_64-linux": dict(descriptor)},
        }

    return _document


class TestResolveAndInstall:
    """Test VersionManager.resolve_and_install."""

    @responses.activate
    def test_install_release(self, manager, catalog_document, make_zig_archive):
        data = make_zig_archive("0.11.0")
        responses.add(responses.GET, CATALOG_URL, json=catalog_document(data))
        responses.add(responses.GET, ZIG_URL, body=data)

        result = manager.resolve_and_install("v0.11.0")

        assert result.version == "0.11.0"
        assert manager.list_installed() == ["0.11.0"]

    def test_empty_token(self, manager):
        with pytest.raises(NoVersionSpecified):
            manager.resolve_and_install("")

    def test_unknown_extra_component(self, manager):
        with pytest.raises(ValueError, match="Unknown extra components: zig-docs"):
            manager.resolve_and_install("0.11.0", extra_components=["zig-docs"])

    @pytest.mark.parametrize("always_force,expected", [(False, False), (True, True)])
    @responses.activate
    def test_force_defaults_to_setting(
        self, zvm_root, linux_platform, catalog_document, always_force, expected
    ):
        responses.add(responses.GET, CATALOG_URL, json=catalog_document(b"data"))
        manager = VersionManager(
            Settings(always_force_install=always_force), zvm_root, platform=linux_platform
        )

        with patch.object(manager.installer, "install") as install:
            manager.resolve_and_install("0.11.0")

        assert install.call_args.kwargs["force"] is expected

    @responses.activate
    def test_explicit_force_overrides_setting(
        self, zvm_root, linux_platform, catalog_document
    ):
        responses.add(responses.GET, CATALOG_URL, json=catalog_document(b"data"))
        manager = VersionManager(
            Settings(always_force_install=False), zvm_root, platform=linux_platform
        )

        with patch.object(manager.installer, "install") as install:
            manager.resolve_and_install("0.11.0", force=True)

        assert install.call_args.kwargs["force"] is True

    @responses.activate
    def test_zls_uses_concrete_master_build(self, manager, catalog_document, zvm_root):
        responses.add(responses.GET, CATALOG_URL, json=catalog_document(b"data"))

        with patch.object(manager.installer, "install") as install, patch.object(
            manager.installer, "install_zls"
        ) as install_zls:
            install.return_value = InstallResult("master", zvm_root / "master", False)
            manager.resolve_and_install(
                "master", extra_components=["zls"], zls_compatibility="full"
            )

        install_zls.assert_called_once_with(
            "master",
            Settings().zls_version_map_url,
            MASTER_BUILD,
            compatibility="full",
            force=False,
        )

    @responses.activate
    def test_custom_version_map(self, zvm_root, linux_platform, catalog_document):
        responses.add(responses.GET, MACH_VERSION_MAP_URL, json=catalog_document(b"d"))
        manager = VersionManager(
            Settings(version_map_url=MACH_VERSION_MAP_URL),
            zvm_root,
            platform=linux_platform,
        )

        assert manager.resolve("0.11.0").version == "0.11.0"
        assert responses.calls[0].request.url == MACH_VERSION_MAP_URL


class TestListing:
    """Test list_installed and list_remote."""

    def test_list_installed(self, manager, fake_install):
        fake_install("0.11.0")
        fake_install("master")

        assert manager.list_installed() == ["0.11.0", "master"]

    @responses.activate
    def test_list_remote(self, manager, catalog_document):
        responses.add(responses.GET, CATALOG_URL, json=catalog_document(b"data"))

        assert manager.list_remote() == ["master", "0.11.0", "0.10.1"]


@symlinks_required
class TestActivateAndUninstall:
    """Scenario: install, activate, then uninstall the active version."""

    def test_activate_normalizes_token(self, manager, fake_install):
        fake_install("0.11.0")

        assert manager.activate(" v0.11.0") == "0.11.0"
        assert manager.current() == "0.11.0"

    def test_activate_empty_token(self, manager):
        with pytest.raises(NoVersionSpecified):
            manager.activate("")

    def test_uninstall_active_version(self, manager, fake_install, zvm_root):
        fake_install("0.11.0")
        manager.activate("0.11.0")

        assert manager.uninstall("0.11.0") == "0.11.0"

        assert manager.list_installed() == []
        assert manager.current() is None
        assert not (zvm_root / "bin").is_symlink()

        with pytest.raises(NotInstalled):
            manager.uninstall("0.11.0")

    def test_uninstall_inactive_version_keeps_pointer(self, manager, fake_install):
        fake_install("0.11.0")
        fake_install("0.10.1")
        manager.activate("0.11.0")

        manager.uninstall("0.10.1")

        assert manager.current() == "0.11.0"


def test_clean_delegates_to_store(manager, zvm_root):
    (zvm_root / "zig-linux-x86_64-0.9.0.tar.xz").write_bytes(b"")

    assert manager.clean() == ["zig-linux-x86_64-0.9.0.tar.xz"]
