"""
Errores clasificados del núcleo de recepciones.

Cada error lleva un `kind` estable; la capa HTTP lo traduce a código de estado
en `setup_exception_handlers`. Los errores de cliente van a 400 y los de
infraestructura a 500.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PVZServiceError(Exception):
    """Base de todos los errores clasificados"""
    kind = "Internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


# ===== ERRORES DE CLIENTE =====

class PVZNotFoundError(PVZServiceError):
    kind = "NotFound"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "pvz not found"


class ReceptionInProgressError(PVZServiceError):
    kind = "Conflict"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "previous reception not closed"


class NoActiveReceptionError(PVZServiceError):
    kind = "NoActiveReception"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "no active reception"


class NoProductsInReceptionError(PVZServiceError):
    kind = "NoProductsInReception"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "no products in reception"


class InvalidDateFormatError(PVZServiceError):
    kind = "InvalidDateFormat"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, value: str):
        super().__init__(f"invalid {field}: {value!r} is not an RFC 3339 timestamp")
        self.field = field
        self.value = value


class UserAlreadyExistsError(PVZServiceError):
    kind = "Conflict"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, email: str):
        super().__init__(f"user with email {email} already exists")
        self.email = email


class InvalidCredentialsError(PVZServiceError):
    kind = "Unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "invalid email or password"


# ===== ERRORES DE INFRAESTRUCTURA =====

class TransactionStartError(PVZServiceError):
    kind = "TransactionStartFailed"
    default_message = "failed to begin transaction"


class TransactionCommitError(PVZServiceError):
    kind = "TransactionCommitFailed"
    default_message = "failed to commit transaction"


class StoreUnavailableError(PVZServiceError):
    kind = "StoreUnavailable"
    default_message = "store unavailable"


# ===== HANDLERS HTTP =====

# Rutas donde un cuerpo inválido cuenta como credenciales inválidas
UNAUTHORIZED_ON_INVALID_BODY = {"/login"}


def error_body(message: str) -> dict:
    return {"message": message}


def setup_exception_handlers(app: FastAPI):
    """Registrar traducción de errores a respuestas JSON {"message": ...}"""

    @app.exception_handler(PVZServiceError)
    async def handle_service_error(request: Request, exc: PVZServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} - {exc.kind}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        status_code = status.HTTP_400_BAD_REQUEST
        if request.url.path in UNAUTHORIZED_ON_INVALID_BODY:
            status_code = status.HTTP_401_UNAUTHORIZED
        return JSONResponse(
            status_code=status_code,
            content=error_body(f"invalid request: {details}")
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None)
        )
