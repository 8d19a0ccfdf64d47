"""Token parsing utilities for package specifiers."""

from typing import Optional, Tuple

RANGE_PREFIX_CHARS = "^~=<>v"


def strip_range_prefix(spec: str) -> str:
    """Reduce a version specifier to its literal base version.

    ``"^2.0.0"`` -> ``"2.0.0"``, ``"~1.2.3"`` -> ``"1.2.3"``,
    ``">=1.0.0"`` -> ``"1.0.0"``. This is a deliberate simplification and
    performs no range search.
    """
    return spec.strip().lstrip(RANGE_PREFIX_CHARS).strip()


def tokenize_rightmost_at(token: str) -> Tuple[str, Optional[str]]:
    """Return (name, version or None) using the rightmost-``@`` rule.

    A leading ``@`` belongs to a scoped name (``@scope/pkg``), so it never
    acts as the separator.
    """
    s = token.strip()
    idx = s.rfind("@")
    if idx <= 0:
        return s, None
    name = s[:idx].strip()
    version = s[idx + 1:].strip()
    return name, (version or None)
