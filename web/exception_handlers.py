"""Exception handlers mapping scraper errors to the API's JSON error shape."""

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

from agenda_scraper.core.exceptions import AgendaScraperError, RequestValidationError


async def scraper_error_handler(request: Request, exc: AgendaScraperError) -> JSONResponse:
    """Return ``{"success": false, "error": ...}`` with the error's HTTP status."""
    if isinstance(exc, RequestValidationError):
        logger.info(f"Rejected {request.url.path}: {exc.message}")
    else:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.http_status,
        content={"success": False, "error": exc.message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500 that does not leak internals."""
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Error interno del servidor"},
    )
