"""Constants used in the project."""

import json
import logging
import os
from enum import Enum

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    INSTALL_ERRORS = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    VERSION = "0.1.0"
    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    USER_AGENT = f"pkgfetch/{VERSION}"
    MANIFEST_FILE = "package.json"
    STORE_DIR = "node_modules"
    CONFIG_FILE = "pkgfetch.yml"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_CHUNK_SIZE = 64 * 1024

    ENV_LOG_LEVEL = "PKGFETCH_LOG_LEVEL"
    ENV_CONFIG = "PKGFETCH_CONFIG"
    ENV_REGISTRY = "PKGFETCH_REGISTRY"
    ENV_TIMEOUT = "PKGFETCH_TIMEOUT"


def _load_yaml_config(path=None):
    """Load a YAML (or JSON) config file and return its mapping.

    Lookup order: explicit ``path``, then ``$PKGFETCH_CONFIG``, then
    ``./pkgfetch.yml``. Returns an empty dict when nothing usable is found.
    """
    candidates = [path, os.environ.get(Constants.ENV_CONFIG), Constants.CONFIG_FILE]
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                if candidate.lower().endswith(".json"):
                    data = json.load(fh)
                else:
                    import yaml  # pylint: disable=import-outside-toplevel

                    data = yaml.safe_load(fh)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Ignoring unreadable config file %s: %s", candidate, exc)
            return {}
        if isinstance(data, dict):
            return data
        logger.warning("Ignoring config file %s: top level is not a mapping", candidate)
        return {}
    return {}
