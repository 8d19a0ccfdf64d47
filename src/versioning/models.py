"""Data models for dependency resolution and installation."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, NamedTuple, Optional


class PackageId(NamedTuple):
    """A (name, literal version) pair."""
    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class PackageMetadata:
    """Registry document for one exact package version."""
    name: str
    version: str
    dependencies: Dict[str, str] = field(default_factory=dict)
    tarball_url: Optional[str] = None


@dataclass(frozen=True)
class VersionConflict:
    """Two differing versions proposed for the same package during traversal."""
    name: str
    existing: str
    proposed: str
    chosen: str


@dataclass
class InstallReport:
    """Outcome of an install run: per-package store paths and failures."""
    installed: Dict[PackageId, Path] = field(default_factory=dict)
    failed: Dict[PackageId, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when every resolved package was materialized."""
        return not self.failed


# Type alias for the flat name -> version mapping produced by the resolver.
ResolvedSet = Dict[str, str]
