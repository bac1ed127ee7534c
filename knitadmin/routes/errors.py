"""Translate domain errors raised by the services into HTTP errors."""
from contextlib import contextmanager

from fastapi import HTTPException

from ..patterns.errors import (
    DuplicateMeasurementRuleError, NotFoundError, PatternAdminError, ReferenceConflictError,
)


def http_error(exc: PatternAdminError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ReferenceConflictError):
        return HTTPException(status_code=409, detail={"message": str(exc), "conflicts": exc.conflicts})
    if isinstance(exc, DuplicateMeasurementRuleError):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


@contextmanager
def translate_errors():
    try:
        yield
    except PatternAdminError as e:
        raise http_error(e)
