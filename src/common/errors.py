"""Exception hierarchy for registry, archive and manifest failures.

All errors derive from ``PkgFetchError`` so the CLI can map them to exit
codes in one place.
"""

from __future__ import annotations

from typing import Optional


class PkgFetchError(Exception):
    """Base error for pkgfetch."""


class ManifestError(PkgFetchError):
    """The manifest is missing, unreadable or has an invalid shape."""


class RegistryError(PkgFetchError):
    """A registry, download or store operation failed for a package."""

    def __init__(
        self,
        message: str,
        package: Optional[str] = None,
        version: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.package = package
        self.version = version


class NotFoundError(RegistryError):
    """Unknown package or version."""


class NetworkError(RegistryError):
    """Transport or connection failure, or an unexpected HTTP status."""


class MalformedResponseError(RegistryError):
    """Registry JSON is missing expected fields or cannot be parsed."""


class ExtractionError(RegistryError):
    """Archive cannot be decompressed or unpacked."""


class FilesystemError(RegistryError):
    """Store directory or temporary file operation failed."""
