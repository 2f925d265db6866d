# evote/errors.py
import logging
from typing import List, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class VotingError(Exception):
    """Base class for every error the API reports to clients."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(VotingError):
    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(VotingError):
    status_code = 404
    default_message = "Not found"


class AlreadyVotedError(VotingError):
    status_code = 400
    default_message = "You have already voted"


class UnauthorizedError(VotingError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(VotingError):
    status_code = 403
    default_message = "Forbidden"


class StorageError(VotingError):
    status_code = 500
    default_message = "Internal Server Error"


class LedgerError(VotingError):
    status_code = 400
    default_message = "Ledger operation failed"


def _format_location(loc) -> str:
    # drop the leading "body"/"query"/"path" marker
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


async def voting_error_handler(request: Request, exc: VotingError) -> JSONResponse:
    if isinstance(exc, StorageError):
        # never leak driver messages to the client
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": StorageError.default_message})

    content = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": _format_location(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    summary = "; ".join(f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors)
    return JSONResponse(
        status_code=400,
        content={"detail": f"Validation error: {summary}", "errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VotingError, voting_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
