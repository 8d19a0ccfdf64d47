"""`install` command: resolve the manifest and populate the package store."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from constants import Constants, ExitCodes
from common.errors import ManifestError, NetworkError, PkgFetchError
from installer import Installer
from manifest import read_dependencies
from registry.npm.client import NpmRegistryClient
from versioning.models import InstallReport
from versioning.resolver import DependencyResolver

logger = logging.getLogger(__name__)


async def resolve_and_install(dependencies, store_root, client: NpmRegistryClient) -> InstallReport:
    """Run the full pipeline with one shared registry client."""
    resolver = DependencyResolver(client)
    resolved = await resolver.resolve(dependencies)
    for name, version in resolved.items():
        logger.info("  %s@%s", name, version)
    return await Installer(client, store_root).install(resolved)


async def _run(manifest_path: str, store_root: str) -> InstallReport:
    dependencies = read_dependencies(manifest_path)
    logger.info("Loaded %d dependency declaration(s) from %s", len(dependencies), manifest_path)
    async with NpmRegistryClient(Constants.REGISTRY_URL_NPM, Constants.REQUEST_TIMEOUT) as client:
        return await resolve_and_install(dependencies, store_root, client)


def run_install(args: Any) -> None:
    """Entry point for the install command; exits with an ``ExitCodes`` value."""
    manifest_path = getattr(args, "MANIFEST", None) or Constants.MANIFEST_FILE
    store_root = Constants.STORE_DIR
    try:
        report = asyncio.run(_run(manifest_path, store_root))
    except ManifestError as exc:
        logger.error("%s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except NetworkError as exc:
        logger.error("Resolution aborted: %s", exc)
        sys.exit(ExitCodes.CONNECTION_ERROR.value)
    except PkgFetchError as exc:
        logger.error("Resolution aborted: %s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if not report.ok:
        for pkg, exc in report.failed.items():
            logger.error("Not installed: %s (%s)", pkg, exc)
        sys.exit(ExitCodes.INSTALL_ERRORS.value)
    sys.exit(ExitCodes.SUCCESS.value)
