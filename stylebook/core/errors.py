"""Error normalization and handlers."""

import logging
from typing import Optional
from uuid import uuid4

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.requests import Request

from stylebook.core.logging import get_request_id


GENERIC_AI_FAILURE_MESSAGE = (
    "I'm having trouble processing your request right now. Please try again in a moment."
)


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id

    def extra_payload(self) -> dict:
        return {}


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class NotFoundError(AppError, ValueError):
    code = "not_found"
    status_code = 404


class PersonNotFoundError(NotFoundError):
    code = "person_not_found"


class SubjectNotFoundError(NotFoundError):
    """A wardrobe item or supply that is missing or belongs to someone else."""
    code = "subject_not_found"


class NotEntitledError(AppError):
    """Tier or quota check failed. Recoverable by upgrading or waiting for the monthly reset."""
    code = "not_entitled"
    status_code = 403

    def __init__(self, message: str, *, usage_info=None, **kwargs):
        super().__init__(message, **kwargs)
        self.usage_info = usage_info

    def extra_payload(self) -> dict:
        if self.usage_info is None:
            return {}
        return {"usage": {"used": self.usage_info.used, "limit": self.usage_info.limit}}


class AIUnavailableError(AppError):
    """The AI call failed, timed out or returned unusable output."""
    code = "ai_unavailable"
    status_code = 502

    def __init__(self, message: str = GENERIC_AI_FAILURE_MESSAGE, **kwargs):
        super().__init__(message, **kwargs)


class MalformedAIResponse(Exception):
    """Raised inside the AI adapter when the model output holds no usable JSON object."""


def _extract_request_id(request: Request, fallback: Optional[str] = None) -> str:
    return (
        getattr(request.state, "request_id", None)
        or get_request_id()
        or fallback
        or str(uuid4())
    )


def _error_payload(code: str, message: str, request_id: str, extra: Optional[dict] = None) -> dict:
    error = {"code": code, "message": message, "request_id": request_id}
    if extra:
        error.update(extra)
    return {
        "error": error,
        "detail": message,
    }


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _extract_request_id(request)
    payload = _error_payload(exc.code, exc.message, rid, exc.extra_payload())
    logger = logging.getLogger("stylebook")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    response = JSONResponse(status_code=exc.status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def http_error_handler(request: Request, exc: HTTPException):
    rid = _extract_request_id(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    message = exc.detail if exc.detail else "HTTP error"
    payload = _error_payload(code, message, rid)
    logger = logging.getLogger("stylebook")
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    response = JSONResponse(status_code=exc.status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _extract_request_id(request)
    logger = logging.getLogger("stylebook")
    logger.error("unhandled.exception", exc_info=True, extra={"request_id": rid, "error_code": "internal_error"})
    payload = _error_payload("internal_error", "Unexpected error", rid)
    response = JSONResponse(status_code=500, content=payload)
    response.headers["x-request-id"] = rid
    return response
