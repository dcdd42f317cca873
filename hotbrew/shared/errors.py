"""Exception hierarchy and FastAPI exception handlers."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.requests import Request


# ---------------------------------------------------------------------------
# HTTP-facing errors (server)
# ---------------------------------------------------------------------------


class AppError(Exception):
    """Base HTTP application error."""

    def __init__(self, detail: str, status_code: int = 500) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class ValidationError(AppError):
    """Validation error (422)."""

    def __init__(self, detail: str = "Validation error") -> None:
        super().__init__(detail=detail, status_code=422)


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(detail=detail, status_code=404)


class ConflictError(AppError):
    """Conflict error (409)."""

    def __init__(self, detail: str = "Conflict") -> None:
        super().__init__(detail=detail, status_code=409)


class ParsingError(AppError):
    """Parsing error (400)."""

    def __init__(self, detail: str = "Parsing error") -> None:
        super().__init__(detail=detail, status_code=400)


class PayloadTooLargeError(AppError):
    """Request body too large (413)."""

    def __init__(self, detail: str = "Request body too large") -> None:
        super().__init__(detail=detail, status_code=413)


class RateLimitError(AppError):
    """Too many requests (429)."""

    def __init__(self, detail: str = "Too many requests") -> None:
        super().__init__(detail=detail, status_code=429)


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers with a FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )


# ---------------------------------------------------------------------------
# Domain errors (CLI, store, sources, daemon)
# ---------------------------------------------------------------------------


class HotbrewError(Exception):
    """Base exception for hotbrew domain failures."""


class ConfigurationError(HotbrewError):
    """Raised when a configuration or profile file cannot be used."""

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        full = f"{message} ({path})" if path else message
        super().__init__(full)


class StoreError(HotbrewError):
    """Raised when the local SQLite store cannot complete an operation."""


class ItemNotFoundError(StoreError):
    """Raised when no stored item matches an id prefix."""

    def __init__(self, id_prefix: str) -> None:
        self.id_prefix = id_prefix
        super().__init__(f"no item matching {id_prefix!r}")


class SourceFetchError(HotbrewError):
    """Raised when a source cannot be fetched or parsed."""

    def __init__(self, source_name: str, reason: str) -> None:
        self.source_name = source_name
        self.reason = reason
        super().__init__(f"{source_name}: {reason}")


class DaemonError(HotbrewError):
    """Raised for daemon lifecycle failures (already running, not running)."""
