"""Typed outcomes of scheduling operations.

Expected rejections are returned, not raised. Storage failures are a different
category and surface as ``BookingStoreError`` from the store.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class ErrorKind(str, Enum):
    DOCTOR_NOT_FOUND = 'DoctorNotFound'
    PAST_DATE = 'PastDate'
    NON_WORKING_DAY = 'NonWorkingDay'
    OUTSIDE_WORKING_HOURS = 'OutsideWorkingHours'
    SLOT_CONFLICT = 'SlotConflict'
    INVALID_STATE_TRANSITION = 'InvalidStateTransition'
    NOT_AUTHORIZED = 'NotAuthorized'
    INVALID_STATUS = 'InvalidStatus'
    APPOINTMENT_NOT_FOUND = 'AppointmentNotFound'


@dataclass(frozen=True)
class SchedulingError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class SchedulingResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[SchedulingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> 'SchedulingResult[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> 'SchedulingResult[T]':
        return cls(error=SchedulingError(kind=kind, message=message))
