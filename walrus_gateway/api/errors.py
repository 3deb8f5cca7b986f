"""Exception handlers translating gateway errors into JSON error bodies."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from walrus_gateway.shared.exceptions import (
    GatewayError,
    IntegrityMismatchError,
    MalformedObjectError,
    UpstreamUnavailableError,
)

from .dependencies import get_app_config

INTERNAL_ERROR_MESSAGE = "An internal server error occurred."


def internal_error_body(request: Request, error: Exception) -> dict:
    """500 body; details only outside production."""
    config = get_app_config(request)
    return {
        "error": INTERNAL_ERROR_MESSAGE,
        "details": "Internal server error" if config.is_production() else str(error),
    }


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    if isinstance(exc, MalformedObjectError):
        logger.warning(f"Data integrity: {exc.message} url={request.query_params.get('name')}")

    if isinstance(exc, UpstreamUnavailableError):
        logger.error(f"Upstream unavailable: {exc.message} url={request.query_params.get('name')}")
        body = {
            "error": "Service temporarily unavailable",
            "details": "Unable to connect to blockchain network",
        }
    elif isinstance(exc, IntegrityMismatchError):
        body = {"error": "Content integrity check failed"}
    elif exc.status_code >= 500:
        logger.error(f"Gateway error: {exc.message}")
        body = internal_error_body(request, exc)
    else:
        body = {"error": exc.message}

    return JSONResponse(status_code=exc.status_code, content=body)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        error = f"Route {request.url.path} not found"
    else:
        error = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
