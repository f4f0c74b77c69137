"""Error Handlers: global exception handlers for the SchoolHub API.

Invariants:
    - SchoolHubError → {"error": message, "details"?} with its own HTTP status
    - RequestValidationError → 400 {"error": "Validation error", "details": [...]}
    - Exception (catch-all) → 500 that never leaks internal details

Design Decisions:
    - Three-layer handler: domain (SchoolHubError), validation (Pydantic), catch-all (Exception)
    - Client errors logged at warning, server errors at error with traceback
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from schoolhub.core.errors import RequestValidationFailed, SchoolHubError

logger = logging.getLogger(__name__)

# Where FastAPI found the invalid value; stripped from the reported path
_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(SchoolHubError)
    async def schoolhub_error_handler(request: Request, exc: SchoolHubError):
        """Handle all SchoolHub domain/infrastructure errors."""
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                **exc.log_extra(),
                "path": request.url.path,
                "method": request.method,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors with field-level details."""
        error = RequestValidationFailed(build_validation_details(exc.errors()))
        logger.warning(
            f"Validation error on {request.url.path}: {error.details}",
            extra={"error_code": error.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error.to_response(),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all that never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "An unexpected error occurred"},
        )


def build_validation_details(errors) -> list[dict]:
    """Flatten Pydantic errors into {path, message, type} issues."""
    details = []
    for e in errors:
        loc = list(e.get("loc", ()))
        if loc and loc[0] in _LOCATIONS:
            loc = loc[1:]
        details.append({
            "path": [str(part) for part in loc],
            "field": ".".join(str(part) for part in loc),
            "message": e.get("msg", ""),
            "type": e.get("type", ""),
        })
    return details
