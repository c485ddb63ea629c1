"""
Fingerprint Middleware for FastAPI / Starlette services

Runs the signature filter before routing and rejects failing requests
with 401.

Usage:
    from fingerprint_core import FingerprintConfig, FingerprintCore
    from fingerprint_core.middleware import FingerprintMiddleware, require_valid_signature

    fingerprint = FingerprintCore(FingerprintConfig.from_env())
    app.add_middleware(FingerprintMiddleware, fingerprint=fingerprint)

    @app.get("/api/data")
    async def get_data(result: VerificationResult = Depends(require_valid_signature)):
        ...
"""

from typing import Optional

import structlog
from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from .core import FingerprintCore
from .models import VerificationResult

logger = structlog.get_logger(__name__)

REJECTION_ERROR = "Invalid request: missing or incorrect signature"


class FingerprintMiddleware(BaseHTTPMiddleware):
    """
    Middleware that enforces request signatures.

    Stores the VerificationResult on ``request.state.fingerprint``.
    Rejections are only returned when enforcement is enabled.
    """

    def __init__(self, app, fingerprint: FingerprintCore):
        super().__init__(app)
        self.fingerprint = fingerprint

    async def dispatch(self, request: Request, call_next):
        result = self.fingerprint.decrypt(
            method=request.method,
            path=request.url.path,
            headers=request.headers,
        )
        request.state.fingerprint = result

        if self.fingerprint.is_filter_init and not result.status:
            logger.warning(
                "fingerprint_rejected",
                path=request.url.path,
                method=request.method,
                reason=result.reason.name,
                client=request.client.host if request.client else "unknown",
            )
            return JSONResponse(
                status_code=401,
                content={"error": REJECTION_ERROR, "details": result.message},
            )

        return await call_next(request)


def get_verification_result(request: Request) -> Optional[VerificationResult]:
    """
    Dependency to get the filter result for the current request.

    Returns None when FingerprintMiddleware is not installed.
    """
    return getattr(request.state, "fingerprint", None)


def require_valid_signature(request: Request) -> VerificationResult:
    """
    Dependency that requires a passing signature check.
    Raises 401 if the middleware did not run or the request failed.
    """
    result = get_verification_result(request)
    if result is None or not result.status:
        raise HTTPException(
            status_code=401,
            detail={
                "error": REJECTION_ERROR,
                "details": result.message if result else "Signature check did not run",
            },
        )
    return result
