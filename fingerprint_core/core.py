"""
Fingerprint Core
================
Request signature filter: exemptions, replay cache and HMAC verification.

Usage:
    from fingerprint_core import FingerprintConfig, FingerprintCore

    fingerprint = FingerprintCore(FingerprintConfig(
        enabled=True,
        secrets=["current-secret", "previous-secret"],
        allowed_ips=["127.0.0.1"],
        whitelisted_paths=["/api/health", "/api/user/:id"],
        asset_prefixes=["/static"],
    ))

    result = fingerprint.decrypt(method="GET", path="/api/data", headers=headers)
    if not result.status:
        ...  # reject with 401 and result.message
"""

import time
from typing import Mapping, Optional

import structlog

from .config import FingerprintConfig
from .exemptions import ExemptionEvaluator
from .models import SignatureMessage, VerificationResult
from .replay_cache import ReplayCache
from .signature import (
    build_canonical_message,
    decode_signature_token,
    parse_token_timestamp,
    replay_key,
    verify_signature,
)

logger = structlog.get_logger(__name__)

REAL_IP_HEADER = "x-real-ip"
FORWARDED_FOR_HEADER = "x-forwarded-for"
USER_AGENT_HEADER = "user-agent"


class FingerprintCore:
    """
    Validates signed requests.

    Decision order:
    1. Whitelisted path -> accept
    2. Whitelisted IP -> accept
    3. Enforcement on and no signature header -> reject
    4. Enforcement on and token replayed too often -> reject
    5. HMAC check against every secret -> accept or reject

    With enforcement off a missing header is accepted and replays are not
    tracked, but a header that is present must still verify.
    """

    def __init__(self, config: FingerprintConfig, cache: Optional[ReplayCache] = None):
        self.config = config
        self.exemptions = ExemptionEvaluator(
            whitelisted_paths=config.whitelisted_paths,
            asset_prefixes=config.asset_prefixes,
            allowed_ips=config.allowed_ips,
        )
        self._cache = cache if cache is not None else ReplayCache(
            freshness_window_seconds=config.freshness_window_seconds,
            admission_threshold=config.admission_threshold,
        )
        logger.info(
            "fingerprint_configured",
            service=config.service_name,
            enabled=config.enabled,
            secrets_count=len(config.secrets),
            allowed_ips_count=len(config.allowed_ips),
            whitelisted_paths_count=len(config.whitelisted_paths),
        )

    @property
    def is_filter_init(self) -> bool:
        """Whether signature enforcement is active."""
        return self.config.enabled

    @property
    def cache(self) -> ReplayCache:
        return self._cache

    def decrypt(
        self,
        method: str = "",
        path: str = "",
        headers: Optional[Mapping[str, str]] = None,
    ) -> VerificationResult:
        """
        Check a request's signature.

        Args:
            method: HTTP method (GET, POST, ...)
            path: Request path without query string
            headers: Request headers; names are matched case-insensitively

        Returns:
            VerificationResult, never raises for a rejected request
        """
        headers = {k.lower(): v for k, v in (headers or {}).items()}

        if self.exemptions.is_whitelisted_path(path):
            return VerificationResult.of(True, SignatureMessage.PATH_WHITE_LISTED)

        ip = headers.get(REAL_IP_HEADER) or headers.get(FORWARDED_FOR_HEADER) or ""
        if self.exemptions.is_whitelisted_ip(ip):
            return VerificationResult.of(True, SignatureMessage.IP_WHITE_LISTED)

        enforced = self.config.enabled
        token = headers.get(self.config.signature_header) or ""
        if enforced and not token:
            logger.info("signature_missing", method=method, path=path, ip=ip)
            return VerificationResult.of(False, SignatureMessage.SIGNATURE_REQUIRED)

        timestamp_text, digest = decode_signature_token(token)
        timestamp = parse_token_timestamp(timestamp_text, now=time.time())

        key = replay_key(timestamp, digest)
        if enforced and self._cache.is_blocked(timestamp, key):
            logger.warning("signature_replayed", method=method, path=path, ip=ip)
            return VerificationResult.of(
                False, SignatureMessage.SIGNATURE_EXISTS_IN_CACHE, detail=token
            )

        message = build_canonical_message(
            method, path, timestamp, headers.get(USER_AGENT_HEADER, "")
        )
        if verify_signature(self.config.secrets, message, digest):
            reason = SignatureMessage.SIGNATURE_IS_VALID
            valid = True
        else:
            reason = SignatureMessage.INVALID_SIGNATURE
            valid = False
            logger.info(
                "signature_invalid",
                method=method,
                path=path,
                ip=ip,
                enforced=enforced,
            )

        # Disabled and unsigned: nothing to verify, so nothing to reject
        return VerificationResult.of(valid or (not enforced and not token), reason)
