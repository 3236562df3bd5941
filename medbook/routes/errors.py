import logging
from contextlib import contextmanager
from typing import Iterator, TypeVar

from fastapi import HTTPException, status

from medbook.scheduling.ports import BookingStoreError
from medbook.scheduling.results import ErrorKind, SchedulingResult

logger = logging.getLogger(__name__)

T = TypeVar('T')

ERROR_STATUS_CODES = {
    ErrorKind.DOCTOR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.APPOINTMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.SLOT_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.PAST_DATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NON_WORKING_DAY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.OUTSIDE_WORKING_HOURS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_STATE_TRANSITION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_STATUS: status.HTTP_400_BAD_REQUEST,
}


def unwrap(result: SchedulingResult[T]) -> T:
    if result.ok:
        return result.value

    error = result.error
    raise HTTPException(
        status_code=ERROR_STATUS_CODES.get(error.kind, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )


@contextmanager
def store_errors_as_http() -> Iterator[None]:
    try:
        yield
    except BookingStoreError as exc:
        logger.exception('Booking store failure')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc
