from __future__ import annotations

import logging

from fastapi import HTTPException

from parcel_history import (
    CapacityError,
    EmptyResultError,
    ParcelHistoryError,
    TransportError,
    ValidationError,
)

LOG = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, 422),
    (CapacityError, 409),
    (EmptyResultError, 404),
    (TransportError, 502),
)


def to_http_exception(exc: ParcelHistoryError) -> HTTPException:
    """Map a domain error to an HTTP error carrying its user-visible message."""
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status = 500
    level = logging.WARNING if status >= 500 else logging.INFO
    LOG.log(level, "%s: %s context=%s", type(exc).__name__, exc, exc.context)
    return HTTPException(status_code=status, detail=str(exc))
