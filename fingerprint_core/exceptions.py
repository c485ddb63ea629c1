"""
Fingerprint Exceptions
======================
Exception classes raised while building a filter.

Routine rejections are never raised; they come back as a VerificationResult.
"""


class FingerprintError(Exception):
    """Base exception for the fingerprint library."""
    pass


class FingerprintConfigError(FingerprintError, ValueError):
    """Raised when a FingerprintConfig cannot produce a working filter."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field
