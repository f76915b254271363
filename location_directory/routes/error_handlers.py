# location_directory/routes/error_handlers.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from location_directory.services.exceptions import LocationDirectoryError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Answers directory errors with the same body shape as HTTPException."""

    @app.exception_handler(LocationDirectoryError)
    async def location_error_handler(request: Request, exc: LocationDirectoryError):
        logger.warning(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
