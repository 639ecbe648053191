import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from friendjobs.crud.base import RecordNotFound
from friendjobs.globalid import InvalidGlobalIDError
from friendjobs.jobs.arguments import DeserializationError, SerializationError
from friendjobs.jobs.base import UnknownJobError

logger = logging.getLogger("friendjobs.api")


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_response(request: Request, status_code: int, detail) -> JSONResponse:
    request_id = _get_request_id(request)
    response = JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "request_id": request_id,
        },
    )
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(request, exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(request, 422, exc.errors())

    @app.exception_handler(RecordNotFound)
    async def record_not_found_handler(request: Request, exc: RecordNotFound):
        return _error_response(request, 404, str(exc))

    @app.exception_handler(SerializationError)
    async def serialization_error_handler(request: Request, exc: SerializationError):
        return _error_response(request, 422, str(exc))

    @app.exception_handler(InvalidGlobalIDError)
    async def invalid_global_id_handler(request: Request, exc: InvalidGlobalIDError):
        return _error_response(request, 422, str(exc))

    # inline jobs whose record vanished before they ran
    @app.exception_handler(DeserializationError)
    async def deserialization_error_handler(request: Request, exc: DeserializationError):
        return _error_response(request, 404, str(exc))

    @app.exception_handler(UnknownJobError)
    async def unknown_job_handler(request: Request, exc: UnknownJobError):
        logger.error("unknown_job request_id=%s error=%s", _get_request_id(request), exc)
        return _error_response(request, 500, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error request_id=%s", _get_request_id(request), exc_info=exc)
        return _error_response(request, 500, "Internal Server Error")
