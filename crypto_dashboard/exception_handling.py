# crypto_dashboard/exception_handling.py
from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import DashboardError, StoreError
from .logging_setup import get_logger

logger = get_logger("crypto_dashboard.exceptions")


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query")]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "Invalid request"


async def dashboard_error_handler(request: Request, exc: DashboardError):
    if isinstance(exc, StoreError) or exc.status_code >= 500:
        logger.exception(
            "STORE_ERROR",
            extra={"handled": True, "path": str(request.url.path), "status_code": exc.status_code},
        )
    else:
        logger.info(
            "REQUEST_REJECTED",
            extra={"path": str(request.url.path), "status_code": exc.status_code, "reason": exc.message},
        )
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Missing or malformed body fields are reported as 400, not FastAPI's default 422
    detail = _describe_validation(exc)
    logger.info("REQUEST_INVALID", extra={"path": str(request.url.path), "reason": detail})
    return JSONResponse({"detail": detail}, status_code=400)


async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(
        "HTTP_EXCEPTION",
        extra={"handled": True, "path": str(request.url.path), "status_code": exc.status_code},
    )
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "UNHANDLED_EXCEPTION",
        extra={"handled": False, "path": str(request.url.path)},
    )
    return JSONResponse({"detail": "Internal Server Error"}, status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers in one place.
    Call from crypto_dashboard/main.py after creating the FastAPI app.
    """
    app.add_exception_handler(DashboardError, dashboard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
