from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class WorkoutTrackerError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WorkoutTrackerError):
    """A required input field is missing or empty."""

    status_code = 400


class NotFoundError(WorkoutTrackerError):
    """A referenced workout or exercise does not exist."""

    status_code = 404


class GenerationError(WorkoutTrackerError):
    """The generator could not be reached or replied with an unexpected envelope."""


class GenerationFormatError(GenerationError):
    """The generator replied, but not with the shape that was asked for."""


class ParseError(GenerationError):
    """The generated text is not valid JSON."""


class InternalError(WorkoutTrackerError):
    pass


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(WorkoutTrackerError)
    async def _tracker_error(request: Request, exc: WorkoutTrackerError) -> JSONResponse:
        logger.error("%s %s failed (%s): %s", request.method, request.url.path, type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("%s %s failed with an internal error", request.method, request.url.path)
        return JSONResponse(status_code=InternalError.status_code, content={"error": str(exc)})
