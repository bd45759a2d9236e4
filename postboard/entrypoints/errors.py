"""
Single translation point from the domain error taxonomy to HTTP responses.

Handlers and domain objects raise ``DomainError`` subclasses and never deal
with status codes; routers do not catch them either.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from postboard.domain import exceptions

logger = logging.getLogger(__name__)

STATUS_CODES = {
    exceptions.ValidationError: status.HTTP_400_BAD_REQUEST,
    exceptions.DuplicateIdentity: status.HTTP_400_BAD_REQUEST,
    exceptions.AlreadyLiked: status.HTTP_400_BAD_REQUEST,
    exceptions.NotLiked: status.HTTP_400_BAD_REQUEST,
    exceptions.PostNotFound: status.HTTP_404_NOT_FOUND,
    exceptions.CommentNotFound: status.HTTP_404_NOT_FOUND,
    exceptions.Forbidden: status.HTTP_403_FORBIDDEN,
    exceptions.Unauthorized: status.HTTP_401_UNAUTHORIZED,
    exceptions.Conflict: status.HTTP_409_CONFLICT,
}


def status_for(exc: exceptions.DomainError) -> int:
    for klass in type(exc).__mro__:
        if klass in STATUS_CODES:
            return STATUS_CODES[klass]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_handler(request: Request, exc: exceptions.DomainError) -> JSONResponse:
    status_code = status_for(exc)
    logger.error(f"{type(exc).__name__}: {status_code} {exc}")
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=status_code, content={"detail": str(exc)}, headers=headers)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Internals stay in the log, the client only sees an opaque failure
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(exceptions.DomainError, domain_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
