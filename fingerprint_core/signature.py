"""
Signature Functions
===================
Canonical message construction, HMAC-SHA256 signing and verification,
and the base64 signature token carried in the request header.

Token wire format: base64("<unix-timestamp-seconds>_<hex-hmac-sha256>")
"""

import base64
import binascii
import hmac
import re
import time
from typing import Dict, Iterable, Optional, Tuple

from .config import DEFAULT_SIGNATURE_HEADER

SIGNATURE_ALGORITHM = "sha256"
TOKEN_SEPARATOR = "_"

_WHITESPACE = re.compile(r"\s+")
_HEX_DIGEST = re.compile(r"(?:[0-9a-fA-F]{2})+")


def normalize_user_agent(user_agent: Optional[str]) -> str:
    """Remove every whitespace run from a User-Agent value."""
    if not user_agent:
        return ""
    return _WHITESPACE.sub("", user_agent)


def build_canonical_message(
    method: str,
    path: str,
    timestamp: int,
    user_agent: str,
) -> str:
    """
    Build the exact string that clients sign.

    Format: ``<method lower>:<path>:<timestamp>:<user-agent without whitespace>``

    Args:
        method: HTTP method
        path: Request path
        timestamp: Unix timestamp in seconds
        user_agent: Raw User-Agent header value

    Returns:
        Canonical message
    """
    return f"{method.lower()}:{path}:{timestamp}:{normalize_user_agent(user_agent)}"


def compute_signature(secret: str, message: str) -> str:
    """
    Compute HMAC-SHA256 of a canonical message.

    Returns:
        Hex-encoded digest
    """
    return hmac.new(
        secret.encode(),
        message.encode(),
        digestmod=SIGNATURE_ALGORITHM,
    ).hexdigest()


def _digest_matches(expected_hex: str, received: bytes) -> bool:
    expected = bytes.fromhex(expected_hex)
    if len(expected) != len(received):
        return False
    return hmac.compare_digest(expected, received)


def verify_signature(secrets: Iterable[str], message: str, received_digest: str) -> bool:
    """
    Verify a received hex digest against every configured secret.

    Uses constant-time comparison. A digest that is not plain hex or has
    the wrong length is rejected rather than raising.

    Args:
        secrets: Shared secrets, current and rotated-out
        message: Canonical message
        received_digest: Hex digest taken from the signature token

    Returns:
        True if the digest matches under any secret
    """
    if not received_digest or not _HEX_DIGEST.fullmatch(received_digest):
        return False
    received = bytes.fromhex(received_digest)

    return any(
        _digest_matches(compute_signature(secret, message), received)
        for secret in secrets
    )


def encode_signature_token(timestamp: int, digest: str) -> str:
    """Encode a timestamp and digest into a header value."""
    raw = f"{timestamp}{TOKEN_SEPARATOR}{digest}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def replay_key(timestamp: int, digest: str) -> str:
    """
    Cache key for a decoded token.

    Equal to the token a conforming client sends; other spellings of the
    same timestamp and digest (hex case, base64 padding, extra segments)
    share the key.
    """
    return encode_signature_token(timestamp, digest.lower())


def decode_signature_token(token: str) -> Tuple[str, str]:
    """
    Decode a header value into its raw timestamp and digest parts.

    Missing base64 padding is restored. Malformed base64 or UTF-8 yields
    empty parts instead of an error.

    Returns:
        (timestamp_text, digest)
    """
    try:
        token = token.strip()
        raw = base64.b64decode(token + "=" * (-len(token) % 4), validate=True)
    except (binascii.Error, ValueError):
        return "", ""
    text = raw.decode("utf-8", errors="replace")
    parts = text.split(TOKEN_SEPARATOR)
    timestamp_text = parts[0]
    digest = parts[1] if len(parts) > 1 else ""
    return timestamp_text, digest


def parse_token_timestamp(timestamp_text: str, now: Optional[float] = None) -> int:
    """
    Parse the timestamp part of a token.

    Only the canonical decimal spelling is accepted, so one signed timestamp
    has exactly one token. Anything else (leading zeros, signs, whitespace,
    non-ASCII digits), or zero, is replaced by the current Unix time, leaving
    the HMAC check to reject the request.
    """
    try:
        timestamp = int(timestamp_text)
    except ValueError:
        timestamp = 0
    if str(timestamp) != timestamp_text:
        timestamp = 0
    if timestamp == 0:
        timestamp = int(time.time() if now is None else now)
    return timestamp


def create_signature_token(
    secret: str,
    method: str,
    path: str,
    user_agent: str = "",
    timestamp: Optional[int] = None,
) -> str:
    """
    Create a signature token the way a conforming client does.

    Args:
        secret: One of the server's shared secrets
        method: HTTP method
        path: Request path
        user_agent: User-Agent the client will send
        timestamp: Unix timestamp in seconds (default: now)

    Returns:
        Base64 token for the signature header
    """
    if timestamp is None:
        timestamp = int(time.time())
    message = build_canonical_message(method, path, timestamp, user_agent)
    return encode_signature_token(timestamp, compute_signature(secret, message))


def create_signed_headers(
    secret: str,
    method: str,
    path: str,
    user_agent: str = "",
    header_name: str = DEFAULT_SIGNATURE_HEADER,
) -> Dict[str, str]:
    """
    Create headers for a signed request.

    Returns:
        Dictionary with the signature header and the User-Agent it covers
    """
    headers = {header_name: create_signature_token(secret, method, path, user_agent)}
    if user_agent:
        headers["user-agent"] = user_agent
    return headers
