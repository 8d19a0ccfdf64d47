"""Breadth-first dependency resolution with version-conflict arbitration."""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Mapping

from common.logging_utils import extra_context, is_debug_enabled
from .compare import higher_version
from .models import PackageId, ResolvedSet, VersionConflict
from .parser import strip_range_prefix

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Flatten a dependency graph into one version per package name.

    The registry client is injected; it only needs an async
    ``fetch_version_metadata(name, version)`` method.
    """

    def __init__(self, client):
        self._client = client
        self.conflicts: List[VersionConflict] = []
        self.metadata_fetches = 0

    def _accept(self, resolved: Dict[str, str], pkg: PackageId) -> bool:
        """Decide whether ``pkg`` should (re)place the resolved entry for its name."""
        existing = resolved.get(pkg.name)
        if existing is None:
            return True
        if existing == pkg.version:
            # Satisfied, typically a circular reference.
            return False

        chosen = higher_version(pkg.version, existing)
        self.conflicts.append(VersionConflict(pkg.name, existing, pkg.version, chosen))
        logger.warning(
            "Dependency conflict for package %s: Installing version %s", pkg.name, chosen
        )
        return chosen == pkg.version

    async def resolve(self, dependencies: Mapping[str, str]) -> ResolvedSet:
        """Resolve root ``dependencies`` (name -> specifier) to a flat mapping.

        Registry errors propagate and abort the whole resolution.
        """
        self.conflicts = []
        self.metadata_fetches = 0
        resolved: Dict[str, str] = {}
        worklist: Deque[PackageId] = deque(
            PackageId(name, strip_range_prefix(spec)) for name, spec in dependencies.items()
        )

        while worklist:
            pkg = worklist.popleft()
            if not self._accept(resolved, pkg):
                continue

            resolved[pkg.name] = pkg.version
            meta = await self._client.fetch_version_metadata(pkg.name, pkg.version)
            self.metadata_fetches += 1
            for dep_name, dep_spec in meta.dependencies.items():
                worklist.append(PackageId(dep_name, strip_range_prefix(dep_spec)))

            if is_debug_enabled(logger):
                logger.debug(
                    "Resolved package",
                    extra=extra_context(
                        event="resolve",
                        component="resolver",
                        package=pkg.name,
                        version=pkg.version,
                        children=len(meta.dependencies),
                        pending=len(worklist),
                    ),
                )

        logger.info("Resolved %d package(s)", len(resolved))
        return dict(resolved)
