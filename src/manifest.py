"""Reading and updating the ``package.json`` manifest."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from common.errors import ManifestError

logger = logging.getLogger(__name__)


def load_manifest(path) -> Dict[str, Any]:
    """Load the manifest document as a dict."""
    manifest_path = Path(path)
    try:
        with open(manifest_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError as exc:
        raise ManifestError(f"manifest not found: {manifest_path}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(f"manifest {manifest_path} is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise ManifestError(f"cannot read manifest {manifest_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"manifest {manifest_path} must be a JSON object")
    return data


def read_dependencies(path) -> Dict[str, str]:
    """Return the manifest's ``dependencies`` map; missing means empty."""
    deps = load_manifest(path).get("dependencies") or {}
    if not isinstance(deps, dict):
        raise ManifestError(f"'dependencies' in {path} must be an object")
    return {str(k): str(v) for k, v in deps.items()}


def add_dependency(path, name: str, version: str) -> Dict[str, Any]:
    """Set ``dependencies[name] = version`` and write the manifest back."""
    data = load_manifest(path)
    deps = data.get("dependencies")
    if deps is None:
        deps = data["dependencies"] = {}
    elif not isinstance(deps, dict):
        raise ManifestError(f"'dependencies' in {path} must be an object")
    deps[name] = version
    try:
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2)
            fh.write("\n")
    except OSError as exc:
        raise ManifestError(f"cannot write manifest {path}: {exc}") from exc
    logger.info("Added %s@%s to %s", name, version, path)
    return data
