"""Runtime configuration for registry URL, timeout and store location.

Precedence, lowest to highest: built-in ``Constants`` defaults, the YAML
config file, environment variables, CLI flags. A bad config file is logged
and ignored so it never breaks the CLI.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from constants import Constants, _load_yaml_config

logger = logging.getLogger(__name__)


def _apply_mapping(cfg: Dict[str, Any]) -> None:
    registry = cfg.get("registry")
    if isinstance(registry, dict):
        if registry.get("url"):
            Constants.REGISTRY_URL_NPM = str(registry["url"])
        if registry.get("timeout") is not None:
            try:
                Constants.REQUEST_TIMEOUT = float(registry["timeout"])
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid registry.timeout: %r", registry["timeout"])
    store = cfg.get("store")
    if isinstance(store, dict) and store.get("dir"):
        Constants.STORE_DIR = str(store["dir"])
    manifest = cfg.get("manifest")
    if isinstance(manifest, str) and manifest:
        Constants.MANIFEST_FILE = manifest


def _apply_environment() -> None:
    env_registry = os.environ.get(Constants.ENV_REGISTRY)
    if env_registry and env_registry.strip():
        Constants.REGISTRY_URL_NPM = env_registry.strip()
    env_timeout = os.environ.get(Constants.ENV_TIMEOUT)
    if env_timeout:
        try:
            Constants.REQUEST_TIMEOUT = float(env_timeout)
        except ValueError:
            logger.warning("Ignoring invalid %s=%r", Constants.ENV_TIMEOUT, env_timeout)


def apply_config(args) -> None:
    """Apply config file, environment and CLI overrides onto ``Constants``."""
    cfg = _load_yaml_config(getattr(args, "CONFIG", None))
    if cfg:
        _apply_mapping(cfg)
    _apply_environment()

    if getattr(args, "REGISTRY", None):
        Constants.REGISTRY_URL_NPM = args.REGISTRY
    if getattr(args, "TIMEOUT", None) is not None:
        Constants.REQUEST_TIMEOUT = float(args.TIMEOUT)
    if getattr(args, "STORE", None):
        Constants.STORE_DIR = args.STORE
    logger.debug(
        "Effective config: registry=%s timeout=%s store=%s",
        Constants.REGISTRY_URL_NPM, Constants.REQUEST_TIMEOUT, Constants.STORE_DIR,
    )
