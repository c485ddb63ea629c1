"""
Fingerprint Models
==================
Result types returned by the signature filter.
"""

from dataclasses import dataclass
from enum import Enum


class SignatureMessage(str, Enum):
    """Outcome of a signature check, with its user-facing text."""
    SIGNATURE_IS_VALID = "Signature is valid"
    INVALID_SIGNATURE = "Invalid signature"
    PATH_WHITE_LISTED = "Path is whitelisted"
    IP_WHITE_LISTED = "IP is whitelisted"
    SIGNATURE_REQUIRED = "Signature is required"
    SIGNATURE_EXISTS_IN_CACHE = "Signature already exists in cache"


@dataclass(frozen=True)
class VerificationResult:
    """Decision for a single request."""
    status: bool
    message: str
    reason: SignatureMessage

    @classmethod
    def of(cls, status: bool, reason: SignatureMessage, detail: str = None) -> "VerificationResult":
        message = reason.value if detail is None else f"{reason.value}: {detail}"
        return cls(status=status, message=message, reason=reason)

    def as_dict(self) -> dict:
        return {"status": self.status, "message": self.message}
