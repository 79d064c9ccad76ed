# app/core/errors.py
from typing import Any, Dict, Optional
from enum import Enum
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ErrorCode(str, Enum):
    BAD_REQUEST = "bad_request"          # 400
    UNAUTHORIZED = "unauthorized"        # 401
    FORBIDDEN = "forbidden"              # 403
    NOT_FOUND = "not_found"              # 404
    CONFLICT = "conflict"                # 409
    VALIDATION_ERROR = "validation_error"# 422
    INTERNAL_ERROR = "internal_error"    # 500


class AppError(Exception):
    """
    Base application error.
    Frontend should key on `code` for i18n and behavior; `error` is the human message.
    """
    status_code: int = 500
    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, *, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.meta = meta

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.code.value}
        if self.meta:
            body["meta"] = self.meta
        return body


class BadRequestError(AppError):
    status_code = 400
    code = ErrorCode.BAD_REQUEST


class UnauthorizedError(AppError):
    status_code = 401
    code = ErrorCode.UNAUTHORIZED


class ForbiddenError(AppError):
    status_code = 403
    code = ErrorCode.FORBIDDEN


class NotFoundError(AppError):
    status_code = 404
    code = ErrorCode.NOT_FOUND


class ConflictError(AppError):
    status_code = 409
    code = ErrorCode.CONFLICT


class ValidationFailed(AppError):
    status_code = 422
    code = ErrorCode.VALIDATION_ERROR


class InternalError(AppError):
    status_code = 500
    code = ErrorCode.INTERNAL_ERROR


def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationFailed("Invalid request payload", meta={"errors": jsonable_encoder(exc.errors())})
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    """Render every AppError (and request validation) with the same body shape."""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_handler)
