"""Materialize a resolved dependency set into the package store."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Mapping

from common.errors import FilesystemError, RegistryError
from versioning.models import InstallReport, PackageId

logger = logging.getLogger(__name__)


def reset_store(store_root) -> Path:
    """Create ``store_root`` if needed and remove everything inside it."""
    root = Path(store_root)
    try:
        root.mkdir(parents=True, exist_ok=True)
        for entry in root.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
    except OSError as exc:
        raise FilesystemError(f"cannot reset package store {root}: {exc}") from exc
    return root


class Installer:
    """Fetch every resolved package into ``store_root/{name}-{version}``.

    Packages are installed one at a time. A failure for one package is
    logged and recorded; already-installed packages are kept.
    """

    def __init__(self, client, store_root):
        self._client = client
        self.store_root = Path(store_root)

    async def install(self, resolved: Mapping[str, str]) -> InstallReport:
        """Reset the store and install ``resolved`` (name -> version)."""
        reset_store(self.store_root)
        report = InstallReport()

        for name, version in resolved.items():
            pkg = PackageId(name, version)
            try:
                path = await self._client.fetch_and_extract_archive(
                    name, version, self.store_root / name
                )
            except RegistryError as exc:
                logger.error("Error installing package %s: %s", pkg, exc)
                report.failed[pkg] = exc
                continue
            report.installed[pkg] = path

        if report.failed:
            logger.warning(
                "Installed %d of %d package(s); %d failed",
                len(report.installed), len(resolved), len(report.failed),
            )
        else:
            logger.info("Installed %d package(s) into %s", len(report.installed), self.store_root)
        return report
