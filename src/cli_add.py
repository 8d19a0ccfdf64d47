"""`add` command: append a dependency to the manifest."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any

from constants import Constants, ExitCodes
from common.errors import ManifestError, NetworkError, PkgFetchError
from manifest import add_dependency
from registry.npm.client import NpmRegistryClient
from versioning.parser import tokenize_rightmost_at

logger = logging.getLogger(__name__)


async def _latest(name: str) -> str:
    async with NpmRegistryClient(Constants.REGISTRY_URL_NPM, Constants.REQUEST_TIMEOUT) as client:
        return await client.resolve_latest_tag(name)


def add_package(manifest_path: str, token: str) -> str:
    """Add ``token`` (``name`` or ``name@version``) and return the version written."""
    name, version = tokenize_rightmost_at(token)
    if version is None:
        version = asyncio.run(_latest(name))
        logger.info("Using latest version of %s: %s", name, version)
    add_dependency(manifest_path, name, version)
    return version


def run_add(args: Any) -> None:
    """Entry point for the add command."""
    manifest_path = getattr(args, "MANIFEST", None) or Constants.MANIFEST_FILE
    try:
        add_package(manifest_path, args.PACKAGE)
    except ManifestError as exc:
        logger.error("%s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except NetworkError as exc:
        logger.error("Registry unreachable: %s", exc)
        sys.exit(ExitCodes.CONNECTION_ERROR.value)
    except PkgFetchError as exc:
        logger.error("%s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)
    sys.exit(ExitCodes.SUCCESS.value)
