"""npm registry client and tarball extraction."""

from .client import NpmRegistryClient, VERSION_NOT_FOUND

__all__ = ["NpmRegistryClient", "VERSION_NOT_FOUND"]
