"""
HTTP error responses.

Error bodies are ``{"code": int, "message": str}``, except the not-found and
malformed-body cases which keep the short ``{"status": ...}`` form that
clients already match on.
"""
from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.application.errors import InvalidRequestError
from app.domain.exceptions import (
    DuplicateEntryError,
    InvalidCustomIdError,
    InvalidEmailError,
    InvalidExternalEmailError,
    InvalidPasswordError,
    InvalidPermissionError,
    InvalidRoleNameError,
    RoleNotAssignedError,
    RoleNotFoundError,
    SystemRoleError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


# ============================================
# Error catalogue
# ============================================

NOT_ALLOWED_VALUE = 2006
MISMATCHED_PATTERN = 2007
INVALID_REQUEST = 2008
NOT_FOUND = 3001
ALREADY_EXISTS = 3002
INTERNAL_SERVER_ERROR = 4002
UNKNOWN = 9003

MESSAGES = {
    NOT_ALLOWED_VALUE: "Not allowed value",
    MISMATCHED_PATTERN: "Input does not match the required pattern",
    INVALID_REQUEST: "Invalid request",
    NOT_FOUND: "Resource not found",
    ALREADY_EXISTS: "Resource already exists",
    INTERNAL_SERVER_ERROR: "Internal server error",
    UNKNOWN: "Unknown error occurred. Please contact support.",
}

# Validation error -> message reported with MISMATCHED_PATTERN
PATTERN_MESSAGES = {
    InvalidCustomIdError: "CustomID does not match the required pattern",
    InvalidEmailError: "Email does not match the required pattern",
    InvalidExternalEmailError: "ExternalEmail does not match the required pattern",
    InvalidRoleNameError: "Name does not match the required pattern",
}


def error_body(code: int, message: Optional[str] = None) -> dict:
    return {"code": code, "message": message or MESSAGES[code]}


def error_response(status_code: int, code: int, message: Optional[str] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(code, message))


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


# ============================================
# Handlers
# ============================================

async def pattern_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Invalid input on {request.method} {request.url.path}: {exc} (request_id={_request_id(request)})")
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        MISMATCHED_PATTERN,
        PATTERN_MESSAGES[type(exc)],
    )


async def not_allowed_value_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Rejected value on {request.method} {request.url.path}: {exc} (request_id={_request_id(request)})")
    return error_response(status.HTTP_400_BAD_REQUEST, NOT_ALLOWED_VALUE, str(exc))


async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
    logger.error(f"Invalid request on {request.method} {request.url.path}: {exc} (request_id={_request_id(request)})")
    return error_response(status.HTTP_400_BAD_REQUEST, INVALID_REQUEST)


async def duplicate_entry_handler(request: Request, exc: DuplicateEntryError) -> JSONResponse:
    logger.error(f"Duplicate entry: {exc} (request_id={_request_id(request)})")
    return error_response(status.HTTP_409_CONFLICT, ALREADY_EXISTS)


async def user_not_found_handler(request: Request, exc: UserNotFoundError) -> JSONResponse:
    logger.warning(f"User {exc.user_id} not found (request_id={_request_id(request)})")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"status": "User Not Found"})


async def role_not_found_handler(request: Request, exc: RoleNotFoundError) -> JSONResponse:
    logger.warning(f"Role {exc.role_id} not found (request_id={_request_id(request)})")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"status": "Role Not Found"})


async def role_not_assigned_handler(request: Request, exc: RoleNotAssignedError) -> JSONResponse:
    logger.warning(f"{exc} (request_id={_request_id(request)})")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"status": "Role Not Assigned"})


async def system_role_handler(request: Request, exc: SystemRoleError) -> JSONResponse:
    logger.warning(f"{exc} (request_id={_request_id(request)})")
    return error_response(status.HTTP_403_FORBIDDEN, NOT_ALLOWED_VALUE, str(exc))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or wrongly typed fields"""
    logger.error(f"Validation error for {request.method} {request.url.path} (request_id={_request_id(request)})")
    logger.error(f"Validation errors: {exc.errors()}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"status": "Bad Request"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Details stay in the log; clients only see the catalogue entry
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path} (request_id={_request_id(request)})")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, UNKNOWN)


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class in PATTERN_MESSAGES:
        app.add_exception_handler(exc_class, pattern_error_handler)
    app.add_exception_handler(InvalidPermissionError, not_allowed_value_handler)
    app.add_exception_handler(InvalidPasswordError, not_allowed_value_handler)
    app.add_exception_handler(InvalidRequestError, invalid_request_handler)
    app.add_exception_handler(DuplicateEntryError, duplicate_entry_handler)
    app.add_exception_handler(UserNotFoundError, user_not_found_handler)
    app.add_exception_handler(RoleNotFoundError, role_not_found_handler)
    app.add_exception_handler(RoleNotAssignedError, role_not_assigned_handler)
    app.add_exception_handler(SystemRoleError, system_role_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
