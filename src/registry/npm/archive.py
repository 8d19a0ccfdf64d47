"""Unpacking of npm package tarballs into the package store."""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import tempfile
from pathlib import Path

from common.errors import ExtractionError, FilesystemError

logger = logging.getLogger(__name__)

# npm tarballs wrap their contents in a single "package/" directory.
PACKAGE_ROOT = "package"


def _find_root(extract_dir: Path) -> Path:
    """Locate the archive's top-level directory.

    Prefers ``package/``; otherwise accepts a single top-level directory,
    which some older tarballs use instead.
    """
    preferred = extract_dir / PACKAGE_ROOT
    if preferred.is_dir():
        return preferred
    entries = list(extract_dir.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    raise ExtractionError(f"archive has no '{PACKAGE_ROOT}/' root directory")


def _unsafe_member_names(tar: tarfile.TarFile) -> list:
    """Member names that are absolute or climb out with ``..``."""
    unsafe = []
    for member in tar.getmembers():
        name = member.name
        if name.startswith(("/", "\\")) or os.path.isabs(name) or ".." in Path(name).parts:
            unsafe.append(name)
    return unsafe


def extract_package(archive_path, target, *, package=None, version=None) -> Path:
    """Extract a gzip tarball and move its root directory to ``target``.

    Extraction happens in a scratch directory beside ``target``, which is
    removed on every exit path. An existing ``target`` is replaced.

    Raises:
        ExtractionError: corrupt or non-gzip archive, unsafe member paths,
            or no recognizable root directory.
        FilesystemError: the scratch directory or final move failed.
    """
    target = Path(target)
    try:
        scratch = Path(tempfile.mkdtemp(prefix=".extract-", dir=target.parent))
    except OSError as exc:
        raise FilesystemError(
            f"cannot create extraction directory in {target.parent}: {exc}",
            package, version,
        ) from exc

    try:
        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                unsafe = _unsafe_member_names(tar)
                if unsafe:
                    raise ExtractionError(
                        f"archive member escapes the package directory: {unsafe[0]}",
                        package, version,
                    )
                # Links pointing outside are rejected by the data filter.
                tar.extractall(path=scratch, filter="data")  # noqa: S202
        except (tarfile.TarError, EOFError, OSError) as exc:
            raise ExtractionError(
                f"cannot extract {os.path.basename(str(archive_path))}: {exc}",
                package, version,
            ) from exc

        try:
            root = _find_root(scratch)
        except ExtractionError as exc:
            raise ExtractionError(str(exc), package, version) from exc

        try:
            if target.is_symlink() or target.is_file():
                target.unlink()
            elif target.exists():
                shutil.rmtree(target)
            os.replace(root, target)
        except OSError as exc:
            raise FilesystemError(
                f"cannot move extracted package to {target}: {exc}", package, version
            ) from exc
    finally:
        shutil.rmtree(scratch, ignore_errors=True)

    logger.debug("Extracted %s to %s", archive_path, target)
    return target
