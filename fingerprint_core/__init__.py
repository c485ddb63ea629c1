"""
Fingerprint Core Library
========================
HMAC request-signature filter with path/IP exemptions and replay protection.
"""

__version__ = "1.0.0"

# Config
from fingerprint_core.config import (
    FingerprintConfig,
    DEFAULT_SIGNATURE_HEADER,
    FRESHNESS_WINDOW_SECONDS,
    SIGNATURE_CACHE_SIZE,
)

# Errors
from fingerprint_core.exceptions import FingerprintError, FingerprintConfigError

# Models
from fingerprint_core.models import SignatureMessage, VerificationResult

# Filter
from fingerprint_core.core import FingerprintCore
from fingerprint_core.exemptions import ExemptionEvaluator, compile_path_pattern
from fingerprint_core.replay_cache import ReplayCache

# Signature
from fingerprint_core.signature import (
    build_canonical_message,
    compute_signature,
    verify_signature,
    encode_signature_token,
    decode_signature_token,
    replay_key,
    create_signature_token,
    create_signed_headers,
    normalize_user_agent,
    SIGNATURE_ALGORITHM,
)

__all__ = [
    # Config
    "FingerprintConfig",
    "DEFAULT_SIGNATURE_HEADER",
    "FRESHNESS_WINDOW_SECONDS",
    "SIGNATURE_CACHE_SIZE",
    # Errors
    "FingerprintError",
    "FingerprintConfigError",
    # Models
    "SignatureMessage",
    "VerificationResult",
    # Filter
    "FingerprintCore",
    "ExemptionEvaluator",
    "compile_path_pattern",
    "ReplayCache",
    # Signature
    "build_canonical_message",
    "compute_signature",
    "verify_signature",
    "encode_signature_token",
    "decode_signature_token",
    "replay_key",
    "create_signature_token",
    "create_signed_headers",
    "normalize_user_agent",
    "SIGNATURE_ALGORITHM",
]
