"""
Application errors and their HTTP rendering.

Every error response has the same body:
    {"error": {"code", "message", "request_id", ["details"]}, "detail": message}
and carries the request id in the `x-request-id` header.
"""

import builtins
import logging
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.requests import Request

from goindia.core.logging import get_request_id

logger = logging.getLogger("goindia")


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.code
        self.status_code = status_code or self.status_code
        self.request_id = request_id
        self.details = details


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class NotFoundError(AppError, ValueError):
    code = "not_found"
    status_code = 404


class PermissionError(AppError, builtins.PermissionError):
    code = "forbidden"
    status_code = 403


class QuotaExceededError(AppError):
    """A metered feature is exhausted for the caller's plan."""
    code = "quota_exceeded"
    status_code = 403

    def __init__(self, feature: str, *, upgrade_url: str = "/pricing", request_id: Optional[str] = None):
        super().__init__(
            f"You have used all of your {feature.replace('_', ' ')} credits. Upgrade to continue.",
            request_id=request_id,
            details={"feature": feature, "upgrade_url": upgrade_url},
        )
        self.feature = feature


class PaymentRequiredError(AppError):
    code = "payment_required"
    status_code = 402


class ProfilePersistenceError(AppError):
    code = "profile_persistence_failed"
    status_code = 503


class TripPersistenceError(AppError):
    code = "trip_persistence_failed"
    status_code = 503


class AIGatewayError(AppError):
    """Base class for failures talking to the text-generation endpoint."""
    code = "ai_error"
    status_code = 502


class AIConfigurationError(AIGatewayError):
    """Missing, placeholder or rejected upstream credential."""
    code = "ai_not_configured"
    status_code = 500


class AIUpstreamError(AIGatewayError):
    """Upstream returned an error, a safety block, or unusable output."""
    code = "ai_upstream_error"
    status_code = 502


class AITransportError(AIGatewayError):
    code = "ai_unavailable"
    status_code = 503


_HTTP_CODES = {401: "unauthorized", 403: "forbidden", 404: "not_found", 405: "method_not_allowed"}


def _request_id(request: Request, preferred: Optional[str] = None) -> str:
    return preferred or getattr(request.state, "request_id", None) or get_request_id() or str(uuid4())


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    *,
    request_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    rid = _request_id(request, request_id)
    error: Dict[str, Any] = {"code": code, "message": message, "request_id": rid}
    if details:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": message},
        headers={"x-request-id": rid},
    )


async def app_error_handler(request: Request, exc: AppError):
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "app.error",
        extra={"error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    return error_response(
        request, exc.status_code, exc.code, exc.message, request_id=exc.request_id, details=exc.details
    )


async def http_error_handler(request: Request, exc: HTTPException):
    code = _HTTP_CODES.get(exc.status_code, "http_error")
    logger.warning("http.error", extra={"error_code": code, "status": exc.status_code})
    return error_response(request, exc.status_code, code, str(exc.detail or "HTTP error"))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled.exception", exc_info=exc, extra={"error_code": "internal_error"})
    return error_response(request, 500, "internal_error", "Unexpected error")
