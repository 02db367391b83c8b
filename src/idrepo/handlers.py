"""FastAPI exception handlers backed by ExceptionTranslator.

Framework exceptions are first converted into the fault types the translator
understands:

- RequestValidationError -> MessageNotReadableError, chained to a
  DateTimeParseError when a timestamp failed to parse
- Starlette HTTPException (unknown route, wrong method, ...) -> ProtocolError

Everything else goes to the translator as-is. Responses are always the
standard envelope; only authentication failures change the status code.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from idrepo.exceptions import (
    AccessDeniedError,
    BaseServiceError,
    ComponentError,
    DateTimeParseError,
    MessageNotReadableError,
    ProtocolError,
)
from idrepo.services.classifier import RequestInfo
from idrepo.services.translator import ExceptionTranslator, TranslatedResponse

# pydantic error types raised when a value can't be read as a datetime
_DATETIME_ERROR_TYPES = frozenset(
    {"datetime_parsing", "datetime_from_date_parsing", "datetime_object_invalid"}
)


def request_info(request: Request) -> RequestInfo:
    return RequestInfo(method=request.method, path=request.url.path)


def _render(result: TranslatedResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.envelope.to_json())


def _find_datetime_parse_error(exc: RequestValidationError) -> DateTimeParseError | None:
    """Return the timestamp parse failure behind a validation error, if any."""
    for error in exc.errors():
        cause = (error.get("ctx") or {}).get("error")
        if isinstance(cause, DateTimeParseError):
            return cause
        if error.get("type") in _DATETIME_ERROR_TYPES:
            return DateTimeParseError(str(error.get("input")), error.get("msg", ""))
    return None


def to_message_not_readable(exc: RequestValidationError) -> MessageNotReadableError:
    error = MessageNotReadableError("Request body could not be read")
    error.__cause__ = _find_datetime_parse_error(exc) or exc
    return error


def to_protocol_error(exc: StarletteHTTPException) -> ProtocolError:
    error = ProtocolError(str(exc.detail), exc.status_code)
    error.__cause__ = exc
    return error


def register_error_handlers(app: FastAPI, translator: ExceptionTranslator) -> None:
    """Register exception handlers on a FastAPI application.

    Args:
        app: The FastAPI application instance to register handlers on.
        translator: Builds the response for every handled exception.
    """

    async def handle_fault(request: Request, exc: Exception) -> JSONResponse:
        return _render(translator.translate(exc, request_info(request)))

    for exc_class in (
        BaseServiceError,
        AccessDeniedError,
        ComponentError,
        MessageNotReadableError,
        ProtocolError,
        Exception,
    ):
        app.add_exception_handler(exc_class, handle_fault)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _render(translator.translate(to_message_not_readable(exc), request_info(request)))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _render(translator.translate(to_protocol_error(exc), request_info(request)))
