"""
Exemption Rules
===============
Path and IP whitelisting that lets a request skip signature checks.
"""

import re
from typing import Iterable, Pattern, Tuple

_NAMED_SEGMENT = re.compile(r":\w+")
_SEGMENT_WILDCARD = "[^/]+"


def compile_path_pattern(pattern: str) -> Pattern[str]:
    """
    Compile a path template into a regex for full-string matching.

    Each ``:name`` placeholder matches exactly one path segment,
    so ``/api/user/:id`` matches ``/api/user/42`` but not ``/api/user/42/x``.
    """
    parts = []
    last = 0
    for match in _NAMED_SEGMENT.finditer(pattern):
        parts.append(re.escape(pattern[last:match.start()]))
        parts.append(_SEGMENT_WILDCARD)
        last = match.end()
    parts.append(re.escape(pattern[last:]))
    return re.compile("".join(parts))


class ExemptionEvaluator:
    """Decides whether a request bypasses signature verification."""

    def __init__(
        self,
        whitelisted_paths: Iterable[str] = (),
        asset_prefixes: Iterable[str] = (),
        allowed_ips: Iterable[str] = (),
    ):
        self.asset_prefixes: Tuple[str, ...] = tuple(asset_prefixes)
        self.allowed_ips = frozenset(allowed_ips)
        self._path_patterns = tuple(
            compile_path_pattern(p) for p in whitelisted_paths
        )

    def is_whitelisted_path(self, path: str) -> bool:
        """Check asset prefixes first, then the whitelist templates."""
        if any(path.startswith(prefix) for prefix in self.asset_prefixes):
            return True
        return any(pattern.fullmatch(path) for pattern in self._path_patterns)

    def is_whitelisted_ip(self, ip: str) -> bool:
        """An empty allow-list disables the IP check entirely."""
        if not self.allowed_ips:
            return True
        return ip in self.allowed_ips
