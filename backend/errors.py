"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class KomikError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class InvalidParameterError(KomikError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class ComicNotFoundError(KomikError):
    def __init__(self, what: str):
        super().__init__(f"Not found: {what}", status_code=404)


class UpstreamUnavailableError(KomikError):
    """The scraped site errored or could not be reached."""

    def __init__(self, url: str, detail: str = ""):
        message = f"Upstream unavailable: {url}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, status_code=502)
        self.url = url


class UpstreamTimeoutError(KomikError):
    def __init__(self, url: str):
        super().__init__(f"Upstream timed out: {url}", status_code=504)
        self.url = url


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(KomikError)
    async def handle_komik_error(_request: Request, exc: KomikError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ())[1:])}: {err.get('msg')}"
            for err in errors
        )
        return JSONResponse({"error": detail or "Invalid request"}, status_code=400)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
