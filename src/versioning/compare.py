"""Numeric version comparison used for conflict arbitration."""

from __future__ import annotations

import logging
import re
from typing import Tuple

import semantic_version

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*v?(\d+)")


def _fallback_key(version: str) -> Tuple[int, int, int]:
    """Leading integer of each dotted field, padded to major.minor.patch."""
    fields = []
    for part in version.split(".")[:3]:
        m = _LEADING_INT.match(part)
        fields.append(int(m.group(1)) if m else 0)
    while len(fields) < 3:
        fields.append(0)
    return fields[0], fields[1], fields[2]


def _parse(version: str):
    try:
        return semantic_version.Version.coerce(version.strip().lstrip("v"))
    except ValueError:
        logger.debug("Unparseable version %r; comparing leading numeric fields", version)
        return None


def compare_versions(v1: str, v2: str) -> int:
    """Compare two version strings field-wise: -1, 0 or 1.

    Major, minor and patch compare as integers, so ``2.10.0 > 2.9.9``.
    """
    p1, p2 = _parse(v1), _parse(v2)
    if p1 is not None and p2 is not None:
        if p1 == p2:
            return 0
        return 1 if p1 > p2 else -1
    k1, k2 = _fallback_key(v1), _fallback_key(v2)
    if k1 == k2:
        return 0
    return 1 if k1 > k2 else -1


def higher_version(proposed: str, existing: str) -> str:
    """Return the higher of two versions; ``existing`` wins ties."""
    if compare_versions(proposed, existing) > 0:
        return proposed
    return existing
