"""NPM registry client: dist-tags, version metadata and tarball download."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import urllib.parse
from pathlib import Path
from typing import Any, Dict, Optional

import aiohttp

from constants import Constants
from common.errors import (
    FilesystemError,
    MalformedResponseError,
    NetworkError,
    NotFoundError,
)
from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url
from versioning.models import PackageMetadata
from versioning.parser import strip_range_prefix

from .archive import extract_package

logger = logging.getLogger(__name__)

VERSION_NOT_FOUND = "Version Not Found"


class NpmRegistryClient:
    """Async client for the npm registry HTTP API.

    One instance is shared by the resolver and the installer for a run; it
    owns a single ``aiohttp.ClientSession``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        chunk_size: Optional[int] = None,
    ):
        """Initialize the registry client.

        Args:
            base_url: Registry root; defaults to ``Constants.REGISTRY_URL_NPM``.
            timeout: Total request timeout in seconds.
            chunk_size: Read size used when streaming tarballs.
        """
        self._base_url = (base_url or Constants.REGISTRY_URL_NPM).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(
            total=timeout if timeout is not None else Constants.REQUEST_TIMEOUT
        )
        self._chunk_size = chunk_size or Constants.DOWNLOAD_CHUNK_SIZE
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def base_url(self) -> str:
        """Registry root URL without a trailing slash."""
        return self._base_url

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": Constants.USER_AGENT},
            )

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "NpmRegistryClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Return the open session, starting it on first use."""
        await self.start()
        return self._session

    # URL helpers

    def package_url(self, name: str) -> str:
        """Packument URL; scoped names keep ``@`` and encode ``/``."""
        return f"{self._base_url}/{urllib.parse.quote(name, safe='@')}"

    def version_url(self, name: str, version: str) -> str:
        return f"{self.package_url(name)}/{urllib.parse.quote(version, safe='')}"

    def tarball_url(self, name: str, version: str) -> str:
        basename = name.rsplit("/", 1)[-1]
        return f"{self._base_url}/{name}/-/{basename}-{version}.tgz"

    # Metadata

    async def _get_json(self, url: str, name: str, version: Optional[str] = None) -> Dict[str, Any]:
        """GET a registry document and decode it as a JSON object."""
        session = await self._get_session()
        target = safe_url(url)
        with Timer() as t:
            try:
                async with session.get(url, headers={"Accept": "application/json"}) as res:
                    status = res.status
                    body = await res.text()
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                logger.debug("npm request to %s failed: %r", target, exc)
                raise NetworkError(f"request to {target} failed: {exc!r}", name, version) from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="npm_client",
                    action="GET",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=target,
                ),
            )

        label = f"{name}@{version}" if version else name
        if status == 404:
            raise NotFoundError(f"{label} not found in registry", name, version)
        if status != 200:
            raise NetworkError(f"unexpected HTTP {status} for {label}", name, version)
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(f"invalid JSON for {label}: {exc}", name, version) from exc
        if not isinstance(data, dict):
            raise MalformedResponseError(f"registry document for {label} is not an object", name, version)
        return data

    async def resolve_latest_tag(self, name: str) -> str:
        """Return the version currently tagged ``latest`` for ``name``."""
        data = await self._get_json(self.package_url(name), name)
        tags = data.get("dist-tags")
        latest = tags.get("latest") if isinstance(tags, dict) else None
        if not isinstance(latest, str) or not latest:
            raise MalformedResponseError(f"{name} has no 'latest' dist-tag", name)
        return latest

    async def fetch_version_metadata(self, name: str, version: str) -> PackageMetadata:
        """Fetch the registry document for one exact version."""
        data = await self._get_json(self.version_url(name, version), name, version)
        deps = data.get("dependencies") or {}
        if not isinstance(deps, dict):
            raise MalformedResponseError(
                f"{name}@{version} has a non-object 'dependencies' field", name, version
            )
        dist = data.get("dist")
        tarball = dist.get("tarball") if isinstance(dist, dict) else None
        return PackageMetadata(
            name=data.get("name") or name,
            version=data.get("version") or version,
            dependencies={str(k): str(v) for k, v in deps.items()},
            tarball_url=tarball,
        )

    async def resolve_compatible_version(self, name: str, version_hint: str) -> str:
        """Return the most recently published version sharing the hint's major.

        Published versions are scanned newest first; ``VERSION_NOT_FOUND``
        is returned when none match. Not used by the resolver, which strips
        range prefixes instead.
        """
        data = await self._get_json(self.package_url(name), name)
        versions = data.get("versions")
        if not isinstance(versions, dict):
            raise MalformedResponseError(f"{name} has no 'versions' map", name)
        major = strip_range_prefix(version_hint).split(".")[0]
        for candidate in reversed(list(versions.keys())):
            if candidate.split(".")[0] == major:
                return candidate
        return VERSION_NOT_FOUND

    # Archives

    async def _download(self, url: str, fh, name: str, version: str) -> int:
        """Stream ``url`` into the open binary file ``fh``; return bytes written."""
        session = await self._get_session()
        written = 0
        try:
            async with session.get(url) as res:
                if res.status != 200:
                    raise NetworkError(
                        f"unexpected HTTP {res.status} downloading {name}@{version}", name, version
                    )
                async for chunk in res.content.iter_chunked(self._chunk_size):
                    fh.write(chunk)
                    written += len(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise NetworkError(
                f"download of {name}@{version} failed: {exc!r}", name, version
            ) from exc
        return written

    async def fetch_and_extract_archive(self, name: str, version: str, destination) -> Path:
        """Download ``name@version`` and unpack it to ``{destination}-{version}``.

        The tarball is written to a temporary file beside the destination and
        removed on every exit path.

        Raises:
            NetworkError: the download failed.
            ExtractionError: the archive is corrupt or unsupported.
            FilesystemError: temp file, rename or cleanup failed.
        """
        destination = Path(destination)
        final_path = destination.with_name(f"{destination.name}-{version}")
        url = self.tarball_url(name, version)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{destination.name}-", suffix=".tgz", dir=destination.parent
            )
        except OSError as exc:
            raise FilesystemError(
                f"cannot create temporary archive for {name}@{version}: {exc}", name, version
            ) from exc

        failed = True
        try:
            with Timer() as t:
                try:
                    with os.fdopen(fd, "wb") as fh:
                        size = await self._download(url, fh, name, version)
                except OSError as exc:
                    raise FilesystemError(
                        f"cannot write temporary archive for {name}@{version}: {exc}",
                        name, version,
                    ) from exc
            if is_debug_enabled(logger):
                logger.debug(
                    "Tarball downloaded",
                    extra=extra_context(
                        event="download",
                        component="npm_client",
                        package=name,
                        version=version,
                        bytes=size,
                        duration_ms=t.duration_ms(),
                        target=safe_url(url),
                    ),
                )
            extract_package(tmp_name, final_path, package=name, version=version)
            failed = False
        finally:
            try:
                os.remove(tmp_name)
            except FileNotFoundError:
                pass
            except OSError as exc:
                if not failed:
                    raise FilesystemError(
                        f"cannot remove temporary archive {tmp_name}: {exc}", name, version
                    ) from exc
                logger.error("Could not remove temporary archive %s: %s", tmp_name, exc)

        logger.info("Downloaded package to %s", final_path)
        return final_path
