"""Maps checklist domain errors onto HTTP responses."""
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from services.errors import (
    ChecklistError,
    GroupConflictError,
    InvalidAnswerError,
    NotFoundError,
    UnsupportedTargetTableError,
)

logger = structlog.get_logger()

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (InvalidAnswerError, 400),
    (UnsupportedTargetTableError, 400),
    (GroupConflictError, 409),
)


async def checklist_error_handler(request: Request, exc: ChecklistError) -> JSONResponse:
    status_code = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    logger.info(
        "checklist_error",
        error=str(exc),
        error_type=type(exc).__name__,
        status_code=status_code,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChecklistError, checklist_error_handler)
