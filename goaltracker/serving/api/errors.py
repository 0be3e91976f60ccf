"""
Error Handling

Maps service exceptions to HTTP responses with an ordered rule table, so
routes stay thin and new error types only need a new rule here.
"""

from typing import List, Optional, Tuple, Type

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from goaltracker.services.errors import (
    DuplicateError,
    GoalTrackerError,
    InvalidAccessTokenError,
    InvalidValueError,
    NotFoundError,
    PersistenceError,
)

logger = structlog.get_logger(__name__)

STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_UNPROCESSABLE = 422
STATUS_SERVICE_UNAVAILABLE = 503
STATUS_INTERNAL_ERROR = 500

MSG_INVALID_LINK = "Invalid or expired link"

# (exception type, status code, fixed detail or None for the exception message).
# First match wins, so specific types go first.
ERROR_RULES: List[Tuple[Type[GoalTrackerError], int, Optional[str]]] = [
    (InvalidAccessTokenError, STATUS_NOT_FOUND, MSG_INVALID_LINK),
    (NotFoundError, STATUS_NOT_FOUND, None),
    (DuplicateError, STATUS_CONFLICT, None),
    (InvalidValueError, STATUS_UNPROCESSABLE, None),
    (PersistenceError, STATUS_SERVICE_UNAVAILABLE, None),
]


def error_to_status(exc: GoalTrackerError) -> Tuple[int, str]:
    for exc_type, status_code, detail in ERROR_RULES:
        if isinstance(exc, exc_type):
            return status_code, detail or str(exc)
    return STATUS_INTERNAL_ERROR, str(exc)


async def goal_tracker_error_handler(request: Request, exc: GoalTrackerError) -> JSONResponse:
    status_code, detail = error_to_status(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request failed",
        error_type=type(exc).__name__,
        status_code=status_code,
        error=detail,
    )
    return JSONResponse(status_code=status_code, content={"detail": detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GoalTrackerError, goal_tracker_error_handler)
