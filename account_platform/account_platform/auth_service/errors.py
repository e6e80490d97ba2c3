"""
API error catalog and the exception handlers that render it.

Every caller-visible failure is an ``ApiError`` with a fixed message and an
integer code; codes are grouped by handler:

- 3000-3003: session verification
- 3100-3102, 4050: login
- 3200-3204: password reset
"""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

BAD_REQUEST = "Bad request"
INTERNAL_SERVER_ERROR = "Internal server error"
UNAUTHORIZED = "Unauthorized"
NOT_FOUND = "Not found"
OK = "ok"


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = INTERNAL_SERVER_ERROR
    code = 0

    def __init__(self, message: str = None, code: int = None, status_code: int = None):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# Session verification

class MissingToken(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "No token provided."
    code = 3000


class AuthFailed(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Failed to authenticate token."
    code = 3001


class AccountLookupError(ApiError):
    message = INTERNAL_SERVER_ERROR + " (Problem finding account)"
    code = 3002


class EmailNotVerified(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = UNAUTHORIZED + " (Email not verified.)"
    code = 3003


# Login

class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = BAD_REQUEST + " (Bad request.)"
    code = 4050


class UnreadableRequest(BadRequest):
    message = BAD_REQUEST + " (There was a problem reading the request.)"
    code = 3100


class InternalError(ApiError):
    code = 3100


class InvalidLogin(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid login."
    code = 3101


class LoginEmailNotVerified(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = BAD_REQUEST + " (Email not verified.)"
    code = 3102


# Password reset

class ResetUnreadableRequest(UnreadableRequest):
    code = 3200


class ResetBadRequest(BadRequest):
    code = 3201


class InvalidResetToken(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = BAD_REQUEST + " (Invalid reset token.)"
    code = 3202


class ResetAccountNotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    message = NOT_FOUND + " (Account not found.)"
    code = 3203


class ResetInternalError(InternalError):
    code = 3204


def log_internal_error(context: str, exc: BaseException, debug: bool = False) -> None:
    """Log a store or crypto failure; details only show up in debug mode."""
    if debug:
        logger.error("%s: %s", context, exc, exc_info=exc)
    else:
        logger.error("%s", context)


def error_body(message: str, code: int) -> dict:
    return {"message": message, "code": code}


async def api_error_handler(request: Request, exc: ApiError):
    logger.info(
        "API error: path=%s status=%s code=%s",
        request.url.path, exc.status_code, exc.code
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.code)
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = 4004 if exc.status_code == status.HTTP_404_NOT_FOUND else exc.status_code
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, code),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Validation error: %s", exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(BAD_REQUEST + " (Bad request.)", 4000)
    )


def register_exception_handlers(app):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
