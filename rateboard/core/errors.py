"""
Translation of data API (PostgREST) errors into HTTP errors.

Constraint violations are passed through with the database message intact
and are never retried.
"""

import logging
from fastapi import HTTPException, status
from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"
NOT_NULL_VIOLATION = "23502"
INVALID_TEXT_REPRESENTATION = "22P02"

_CONSTRAINT_STATUS = {
    UNIQUE_VIOLATION: status.HTTP_409_CONFLICT,
    FOREIGN_KEY_VIOLATION: status.HTTP_400_BAD_REQUEST,
    CHECK_VIOLATION: status.HTTP_400_BAD_REQUEST,
    NOT_NULL_VIOLATION: status.HTTP_400_BAD_REQUEST,
    INVALID_TEXT_REPRESENTATION: status.HTTP_400_BAD_REQUEST,
}


def api_error_message(error: APIError) -> str:
    return error.message or str(error)


def http_error_from_api_error(error: APIError) -> HTTPException:
    status_code = _CONSTRAINT_STATUS.get(error.code)
    message = api_error_message(error)
    if status_code is None:
        logger.error(f"Data API error ({error.code}): {message}")
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)
    logger.info(f"Constraint violation ({error.code}): {message}")
    return HTTPException(status_code=status_code, detail=message)


def not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")
