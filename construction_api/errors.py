"""
Exception types raised by the data access and authentication layers,
and the FastAPI handlers that turn them into HTTP responses.

Expected conditions (missing rows, id mismatches, bad credentials) carry a
message that is safe to return.  Storage and configuration failures are
logged where they happen and answered with a fixed message so nothing
internal reaches the client.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ConstructionApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def detail(self) -> str:
        return self.message


class NotFoundError(ConstructionApiError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not found"


class IdMismatchError(ConstructionApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "The identifier in the URL does not match the identifier in the body"


class InvalidCredentialsError(ConstructionApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Invalid username or password"


class InvalidTokenError(ConstructionApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Invalid or expired token"


class PersistenceError(ConstructionApiError):
    """The database rejected or failed an operation."""

    @property
    def detail(self) -> str:
        return self.public_message


class ConfigurationError(ConstructionApiError):
    """Required server configuration (e.g. the signing secret) is missing."""

    public_message = "Server configuration error."

    @property
    def detail(self) -> str:
        return self.public_message


async def _construction_api_error_handler(request: Request, exc: ConstructionApiError) -> JSONResponse:
    headers = None
    if isinstance(exc, InvalidTokenError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error processing %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": ConstructionApiError.public_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ConstructionApiError, _construction_api_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
