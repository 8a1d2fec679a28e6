"""
Error types and FastAPI exception handlers
"""
import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class QueryValidationError(Exception):
    """
    Raised when request query parameters fail type, enum or shape checks.

    `errors` is a list of {"field": ..., "message": ...} entries, one per
    offending field.
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "QueryValidationError":
        return cls("Invalid request parameters", field_errors(exc))

    @property
    def fields(self) -> List[str]:
        return [error["field"] for error in self.errors]


def field_errors(exc: ValidationError) -> List[Dict[str, str]]:
    """Flatten a pydantic ValidationError into field/message pairs"""
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


async def query_validation_error_handler(request: Request, exc: QueryValidationError) -> JSONResponse:
    logger.info(f"Rejected {request.url.path}: invalid fields {exc.fields}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "type": "invalid_data",
            "message": exc.message,
            "errors": exc.errors,
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "type": "unknown_error",
            "message": "An unknown error occurred.",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QueryValidationError, query_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
