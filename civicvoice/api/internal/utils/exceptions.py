# Third-party imports
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import sentry_sdk

# Local application imports
from civicvoice.core.monitoring.logging import get_contextual_logger
from civicvoice.schemas.common import BaseResponse
from civicvoice.services.exceptions import CivicVoiceError
from civicvoice.settings import CommonSettings

# Map specific HTTP status codes to custom error codes
ERROR_MAP = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "unprocessable_entity",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}

MAX_VALIDATION_ERRORS = 5


def _clean_validation_message(message: str) -> str:
    # Remove "body: Value error, " or just "Value error, " prefixes
    for prefix in ("body: Value error, ", "Value error, "):
        if message.startswith(prefix):
            return message[len(prefix) :]
    return message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CivicVoiceError)
    async def domain_exception_handler(request: Request, exc: CivicVoiceError) -> JSONResponse:
        logger = get_contextual_logger(
            __name__, request_id=getattr(request.state, "request_id", None), path=request.url.path
        )
        if exc.status_code >= 500:
            logger.warning(f"{exc.code}: {exc.message}")
        else:
            logger.debug(f"{exc.code}: {exc.message}")

        response = BaseResponse.failure(
            code=exc.code,
            kind=exc.kind,
            message=exc.message,
            details=exc.details or None,
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=response.model_dump(), headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,  # noqa
        exc: HTTPException,
    ) -> JSONResponse:
        # Determine the error code based on the status code
        error_code = ERROR_MAP.get(exc.status_code, "error")
        # Ensure the detail is a string; if not, convert it
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = BaseResponse.failure(code=error_code, message=detail)
        return JSONResponse(status_code=exc.status_code, content=response.model_dump(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,  # noqa
        exc: RequestValidationError,
    ) -> JSONResponse:
        # Format validation errors into a more readable message
        error_details = [_clean_validation_message(error.get("msg", "")) for error in exc.errors()]

        shown = error_details[:MAX_VALIDATION_ERRORS]
        if len(error_details) > MAX_VALIDATION_ERRORS:
            shown.append("...and more errors")
        detail = "; ".join(shown) if shown else "Invalid request data"

        response = BaseResponse.failure(code="bad_request", message=detail)
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger = get_contextual_logger(
            __name__, request_id=getattr(request.state, "request_id", None), path=request.url.path
        )
        logger.error(f"Unhandled {type(exc).__name__}: {exc}")
        # Capture the exception in Sentry for monitoring
        sentry_sdk.capture_exception(exc)

        settings: CommonSettings = request.app.state.settings
        message = "An unexpected error occurred. Please try again later."
        if settings.DEBUG_MODE and settings.ENVIRONMENT != "production":
            message = f"{message} ({type(exc).__name__}: {exc})"

        response = BaseResponse.failure(code="internal_server_error", message=message)
        return JSONResponse(status_code=500, content=response.model_dump())
