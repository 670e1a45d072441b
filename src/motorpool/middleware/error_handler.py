"""Exception handlers — every failure becomes the same envelope.

Learn: services raise MotorpoolError subclasses and let them propagate.
By the time a handler here runs, the request's db session has already
been released by its dependency, so no error path can leak a connection.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from motorpool.errors import MotorpoolError, StorageError, Unauthorized, ValidationError

logger = structlog.get_logger()


def failure(error: MotorpoolError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(error, Unauthorized) else None
    return JSONResponse(
        status_code=error.status,
        content={"success": False, "message": error.message, "data": error.to_dict()},
        headers=headers,
    )


async def handle_domain_error(request: Request, exc: MotorpoolError) -> JSONResponse:
    if exc.status >= 500:
        logger.error("request.failed", code=exc.code, path=request.url.path)
    return failure(exc)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return failure(ValidationError(detail=jsonable_encoder(exc.errors())))


async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("db.query_failed", path=request.url.path, error=str(exc))
    return failure(StorageError())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MotorpoolError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_storage_error)
