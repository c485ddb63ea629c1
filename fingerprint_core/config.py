"""
Fingerprint Configuration
=========================
Filter configuration and environment loading.
"""

import os
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Tuple

from .exceptions import FingerprintConfigError

DEFAULT_SIGNATURE_HEADER = "x-request-uuid"
FRESHNESS_WINDOW_SECONDS = 10
SIGNATURE_CACHE_SIZE = 2  # repeat presentations tolerated per token

ENV_PREFIX = "FINGERPRINT_"
_TRUTHY = {"1", "true", "yes", "on"}


def _as_tuple(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    return tuple(values)


def _split_env(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class FingerprintConfig:
    """
    Immutable settings for a FingerprintCore.

    Whitelisted path patterns may contain named segments such as
    ``/api/user/:id``; each one matches exactly one path segment.
    An empty ``allowed_ips`` exempts every source IP.
    """
    enabled: bool = False
    secrets: Tuple[str, ...] = ()
    allowed_ips: Tuple[str, ...] = ()
    whitelisted_paths: Tuple[str, ...] = ()
    asset_prefixes: Tuple[str, ...] = ()
    signature_header: str = DEFAULT_SIGNATURE_HEADER
    freshness_window_seconds: int = FRESHNESS_WINDOW_SECONDS
    admission_threshold: int = SIGNATURE_CACHE_SIZE
    service_name: str = field(default="fingerprint", compare=False)

    def __post_init__(self):
        # Accept lists from callers, store tuples
        for name in ("secrets", "allowed_ips", "whitelisted_paths", "asset_prefixes"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

        header = (self.signature_header or "").strip().lower()
        if not header:
            raise FingerprintConfigError(
                "signature_header must not be empty", field="signature_header"
            )
        object.__setattr__(self, "signature_header", header)

        if self.enabled and not any(self.secrets):
            raise FingerprintConfigError(
                "At least one secret is required when enforcement is enabled",
                field="secrets",
            )
        if self.freshness_window_seconds <= 0:
            raise FingerprintConfigError(
                "freshness_window_seconds must be positive",
                field="freshness_window_seconds",
            )
        if self.admission_threshold < 0:
            raise FingerprintConfigError(
                "admission_threshold must not be negative",
                field="admission_threshold",
            )

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "FingerprintConfig":
        """
        Build a config from environment variables.

        List values are comma-separated, e.g.
        ``FINGERPRINT_SECRETS=current-key,previous-key``.

        Args:
            prefix: Variable name prefix
            environ: Mapping to read instead of os.environ

        Returns:
            FingerprintConfig
        """
        env = os.environ if environ is None else environ

        def get(name: str, default: str = "") -> str:
            return env.get(f"{prefix}{name}", default)

        try:
            window = int(get("FRESHNESS_WINDOW_SECONDS", str(FRESHNESS_WINDOW_SECONDS)))
            threshold = int(get("ADMISSION_THRESHOLD", str(SIGNATURE_CACHE_SIZE)))
        except ValueError as e:
            raise FingerprintConfigError(f"Invalid numeric setting: {e}") from e

        return cls(
            enabled=get("ENABLED", "false").strip().lower() in _TRUTHY,
            secrets=_split_env(get("SECRETS")),
            allowed_ips=_split_env(get("ALLOWED_IPS")),
            whitelisted_paths=_split_env(get("WHITELISTED_PATHS")),
            asset_prefixes=_split_env(get("ASSET_PREFIXES")),
            signature_header=get("SIGNATURE_HEADER", DEFAULT_SIGNATURE_HEADER),
            freshness_window_seconds=window,
            admission_threshold=threshold,
            service_name=get("SERVICE_NAME", "fingerprint"),
        )
