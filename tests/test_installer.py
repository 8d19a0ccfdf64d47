"""Tests for the package store installer."""

import asyncio
from unittest.mock import patch

import pytest

from common.errors import FilesystemError, NetworkError
from installer import Installer, reset_store
from versioning.models import PackageId
from versioning.resolver import DependencyResolver
from fake_registry import FakeRegistry, fail_first_archive_write, serve


def _snapshot(root):
    """Map of relative path -> bytes (None for directories)."""
    return {
        str(p.relative_to(root)): (None if p.is_dir() else p.read_bytes())
        for p in sorted(root.rglob("*"))
    }


@pytest.fixture
def registry():
    reg = FakeRegistry()
    reg.publish("x", "1.0.0")
    reg.publish("y", "2.0.0", dependencies={"z": "^3.0.0"})
    reg.publish("z", "3.0.0")
    return reg


class TestResetStore:
    """Store directory preparation."""

    def test_creates_missing_store(self, tmp_path):
        root = reset_store(tmp_path / "node_modules")
        assert root.is_dir()
        assert list(root.iterdir()) == []

    def test_clears_existing_contents(self, tmp_path):
        store = tmp_path / "node_modules"
        (store / "old-1.0.0" / "lib").mkdir(parents=True)
        (store / "old-1.0.0" / "lib" / "a.js").write_text("a")
        (store / ".hidden").write_text("h")
        reset_store(store)
        assert list(store.iterdir()) == []

    def test_store_path_is_a_file(self, tmp_path):
        blocker = tmp_path / "node_modules"
        blocker.write_text("not a directory")
        with pytest.raises(FilesystemError):
            reset_store(blocker)


class TestInstall:
    """Installing a resolved set."""

    def test_single_package_replaces_prior_contents(self, registry, tmp_path):
        store = tmp_path / "node_modules"
        store.mkdir()
        (store / "unrelated.txt").write_text("stale")

        report = asyncio.run(serve(registry, lambda c: Installer(c, store).install({"x": "1.0.0"})))

        assert sorted(p.name for p in store.iterdir()) == ["x-1.0.0"]
        assert (store / "x-1.0.0" / "package.json").is_file()
        assert report.ok
        assert report.installed == {PackageId("x", "1.0.0"): store / "x-1.0.0"}

    def test_failure_does_not_stop_other_packages(self, registry, tmp_path):
        store = tmp_path / "node_modules"
        registry.status_overrides["/y/-/y-2.0.0.tgz"] = 500
        resolved = {"x": "1.0.0", "y": "2.0.0", "z": "3.0.0"}

        report = asyncio.run(serve(registry, lambda c: Installer(c, store).install(resolved)))

        assert sorted(p.name for p in store.iterdir()) == ["x-1.0.0", "z-3.0.0"]
        assert not report.ok
        assert list(report.failed) == [PackageId("y", "2.0.0")]
        assert isinstance(report.failed[PackageId("y", "2.0.0")], NetworkError)

    def test_write_failure_does_not_stop_other_packages(self, registry, tmp_path):
        """A disk error on one temp archive is recorded and the next package installs."""
        store = tmp_path / "node_modules"
        resolved = {"x": "1.0.0", "z": "3.0.0"}

        with patch("registry.npm.client.os.fdopen", new=fail_first_archive_write()):
            report = asyncio.run(serve(registry, lambda c: Installer(c, store).install(resolved)))

        assert sorted(p.name for p in store.iterdir()) == ["z-3.0.0"]
        assert list(report.failed) == [PackageId("x", "1.0.0")]
        assert isinstance(report.failed[PackageId("x", "1.0.0")], FilesystemError)
        assert report.installed == {PackageId("z", "3.0.0"): store / "z-3.0.0"}

    def test_scoped_package_installs_under_scope_directory(self, tmp_path):
        reg = FakeRegistry()
        reg.publish("@s/p", "1.0.0")
        store = tmp_path / "node_modules"

        report = asyncio.run(serve(reg, lambda c: Installer(c, store).install({"@s/p": "1.0.0"})))

        assert report.ok
        assert (store / "@s" / "p-1.0.0" / "package.json").is_file()
        assert report.installed == {PackageId("@s/p", "1.0.0"): store / "@s" / "p-1.0.0"}

    def test_reinstall_is_idempotent(self, registry, tmp_path):
        store = tmp_path / "node_modules"
        resolved = {"x": "1.0.0", "y": "2.0.0"}

        asyncio.run(serve(registry, lambda c: Installer(c, store).install(resolved)))
        first = _snapshot(store)
        asyncio.run(serve(registry, lambda c: Installer(c, store).install(resolved)))

        assert _snapshot(store) == first
        assert first

    def test_resolve_then_install(self, registry, tmp_path):
        """End to end through the resolver with one shared client."""
        store = tmp_path / "node_modules"

        async def _pipeline(client):
            resolved = await DependencyResolver(client).resolve({"x": "1.0.0", "y": "^2.0.0"})
            return resolved, await Installer(client, store).install(resolved)

        resolved, report = asyncio.run(serve(registry, _pipeline))

        assert resolved == {"x": "1.0.0", "y": "2.0.0", "z": "3.0.0"}
        assert report.ok
        assert sorted(p.name for p in store.iterdir()) == ["x-1.0.0", "y-2.0.0", "z-3.0.0"]
