"""
Shared pytest fixtures for zvm tests.

Archives built here mimic the upstream Zig tarballs: one top-level folder
holding a `zig` entry point. The fake `zig` is a shell script that prints
its build for `zig version` and exits with a chosen code for `zig exit N`.
"""

import hashlib
import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from zvm.core.platform import PlatformInfo, clear_platform_cache
from zvm.toolchain.store import Store

DOWNLOAD_BASE = "https://ziglang.org/download"

FAKE_ZIG = """#!/bin/sh
case "$1" in
  version) echo "{build}" ;;
  exit) exit "$2" ;;
esac
exit 0
"""


def sha256_of(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def build_archive(files, top="zig-linux-x86_64", fmt="tar.xz") -> bytes:
    """
    Build an in-memory archive.

    Args:
        files: Relative name -> (text content, mode)
        top: Top-level folder wrapping all members ('' for a flat archive)
        fmt: 'tar.xz' or 'zip'
    """
    buf = io.BytesIO()

    def member(name):
        return f"{top}/{name}" if top else name

    if fmt == "zip":
        with zipfile.ZipFile(buf, "w") as zf:
            for name, (content, mode) in files.items():
                info = zipfile.ZipInfo(member(name))
                info.external_attr = mode << 16
                zf.writestr(info, content)
    else:
        with tarfile.open(fileobj=buf, mode="w:xz") as tar:
            for name, (content, mode) in files.items():
                data = content.encode()
                info = tarfile.TarInfo(member(name))
                info.size = len(data)
                info.mode = mode
                tar.addfile(info, io.BytesIO(data))

    return buf.getvalue()


@pytest.fixture
def linux_platform() -> PlatformInfo:
    """The platform every store in the tests is bound to."""
    return PlatformInfo("linux", "x86_64")


@pytest.fixture
def zvm_root(tmp_path: Path) -> Path:
    root = tmp_path / "zvm"
    root.mkdir()
    return root


@pytest.fixture
def store(zvm_root: Path, linux_platform: PlatformInfo) -> Store:
    return Store(zvm_root, platform=linux_platform)


@pytest.fixture
def archive_builder():
    """Expose build_archive to tests that need non-Zig archives."""
    return build_archive


@pytest.fixture
def make_zig_archive():
    """Factory for Zig-shaped archives: make_zig_archive(build, with_binary=True)."""

    def _make(build="0.11.0", with_binary=True, fmt="tar.xz"):
        files = {"lib/std/std.zig": ("pub const x = 1;\n", 0o644)}
        if with_binary:
            binary = "zig.exe" if fmt == "zip" else "zig"
            files[binary] = (FAKE_ZIG.format(build=build), 0o755)
        return build_archive(files, top=f"zig-linux-x86_64-{build}", fmt=fmt)

    return _make


@pytest.fixture
def catalog_entry():
    """Factory for one catalog entry serving data under a given URL."""

    def _entry(url, data, build=None, platform_key="x86_64-linux"):
        entry = {
            "date": "2023-08-04",
            "src": {
                "tarball": f"{DOWNLOAD_BASE}/src.tar.xz",
                "shasum": "0" * 64,
                "size": "15000000",
            },
            platform_key: {
                "tarball": url,
                "shasum": sha256_of(data),
                "size": str(len(data)),
            },
        }
        if build is not None:
            entry["version"] = build
        return entry

    return _entry


@pytest.fixture
def fake_install(store: Store):
    """Create an installed version directly in the store, without the network."""

    def _install(version, build=None, with_binary=True):
        target = store.path_for(version)
        (target / "lib").mkdir(parents=True)
        if with_binary:
            binary = target / store.platform.binary_name()
            binary.write_text(FAKE_ZIG.format(build=build or version))
            binary.chmod(0o755)
        return target

    return _install


@pytest.fixture
def snapshot():
    """Relative paths of everything under a directory, for before/after checks."""

    def _snapshot(root: Path):
        return sorted(str(p.relative_to(root)) for p in root.rglob("*"))

    return _snapshot


@pytest.fixture(autouse=True)
def reset_caches():
    """Reset module-level caches between tests."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the real data directory and terminal settings."""
    monkeypatch.delenv("ZVM_PATH", raising=False)
    monkeypatch.delenv("ZVM_DEBUG", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
