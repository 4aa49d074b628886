import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from errors import ForumError, StorageError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register the global error handlers on the app."""

    @app.exception_handler(ForumError)
    async def forum_error_handler(request: Request, exc: ForumError):
        log = logger.error if isinstance(exc, StorageError) else logger.info
        log(f"ForumError: {exc.message}", extra={"error_code": exc.code, "path": request.url.path})
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request data",
                    "category": "validation",
                    "details": [
                        {
                            "field": ".".join(str(loc) for loc in e["loc"]),
                            "message": e["msg"],
                            "type": e["type"],
                        }
                        for e in exc.errors()
                    ],
                }
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        # never leak internals
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                }
            },
        )
