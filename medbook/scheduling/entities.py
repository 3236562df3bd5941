"""Plain data carried between the scheduling core and its store."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional

STATUS_SCHEDULED = 'scheduled'
STATUS_COMPLETED = 'completed'
STATUS_CANCELLED = 'cancelled'
APPOINTMENT_STATUSES = (STATUS_SCHEDULED, STATUS_COMPLETED, STATUS_CANCELLED)
TERMINAL_STATUSES = frozenset({STATUS_COMPLETED, STATUS_CANCELLED})

ROLE_PATIENT = 'patient'
ROLE_DOCTOR = 'doctor'
ROLE_ADMIN = 'admin'
USER_ROLES = (ROLE_PATIENT, ROLE_DOCTOR, ROLE_ADMIN)

WEEKDAY_NAMES = (
    'Monday',
    'Tuesday',
    'Wednesday',
    'Thursday',
    'Friday',
    'Saturday',
    'Sunday',
)


@dataclass(frozen=True)
class WorkingHours:
    start: str
    end: str


@dataclass(frozen=True)
class DoctorProfile:
    id: int
    name: str
    working_days: frozenset[str]
    working_hours: WorkingHours
    specialization: str = ''


@dataclass
class AppointmentRecord:
    id: Optional[int]
    patient_id: int
    doctor_id: int
    date: date
    start_time: str
    end_time: str
    reason: str
    status: str = STATUS_SCHEDULED
    notes: str = ''
    created_by: str = ROLE_PATIENT
    created_at: Optional[datetime] = None

    def copy(self, **changes) -> 'AppointmentRecord':
        return replace(self, **changes)


@dataclass(frozen=True)
class Requester:
    """Identity handed to the core by the auth boundary."""
    id: int
    role: str


@dataclass
class AppointmentPatch:
    """Fields a caller wants to change; ``None`` means keep the stored value."""
    date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

    def touches_schedule(self) -> bool:
        return any(value is not None for value in (self.date, self.start_time, self.end_time))


@dataclass(frozen=True)
class TimeSlot:
    start_time: str
    end_time: str


@dataclass
class Availability:
    doctor: DoctorProfile
    date: date
    slots: list[TimeSlot] = field(default_factory=list)
    note: Optional[str] = None
