# server/api/errors.py

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from server.core.exceptions import StoreError, UserError
from server.schemas.response import error_envelope


# -------------------------------
# Handlers
# -------------------------------

async def user_error_handler(request: Request, exc: UserError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.opt(exception=exc.__cause__ or exc).error(
            "Store failure on {} {}", request.method, request.url.path
        )
        body = error_envelope(exc.message)
    else:
        body = error_envelope(exc.message, exc.error)
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed bodies (not an object, missing keys, wrong JSON types).
    The offending input values are not echoed back since they may hold
    a password.
    """
    problems = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"][1:]) or "body"
        problems.append(f"{field}: {error['msg']}")
    return JSONResponse(
        status_code=400,
        content=error_envelope("Validation error", "; ".join(problems)),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_envelope("Something went wrong!"))


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
