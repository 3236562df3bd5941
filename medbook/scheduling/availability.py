import logging
from datetime import date
from typing import Iterator

from medbook.scheduling.clock import from_minutes, to_minutes
from medbook.scheduling.entities import Availability, TimeSlot, WorkingHours
from medbook.scheduling.overlap import slot_taken
from medbook.scheduling.ports import BookingStore
from medbook.scheduling.results import ErrorKind, SchedulingResult
from medbook.scheduling.working_window import is_working_day, weekday_name

logger = logging.getLogger(__name__)

DEFAULT_SLOT_DURATION_MINUTES = 30


def iterate_candidate_slots(hours: WorkingHours, slot_minutes: int = DEFAULT_SLOT_DURATION_MINUTES) -> Iterator[TimeSlot]:
    """Yield back-to-back slots from the start of the working window.

    A trailing remainder shorter than ``slot_minutes`` is not offered.
    """
    current = to_minutes(hours.start)
    window_end = to_minutes(hours.end)

    while current + slot_minutes <= window_end:
        yield TimeSlot(start_time=from_minutes(current), end_time=from_minutes(current + slot_minutes))
        current += slot_minutes


class AvailabilityGenerator:
    def __init__(self, store: BookingStore, slot_minutes: int = DEFAULT_SLOT_DURATION_MINUTES) -> None:
        self.store = store
        self.slot_minutes = slot_minutes

    def list_available_slots(self, doctor_id: int, day: date) -> SchedulingResult[Availability]:
        doctor = self.store.find_doctor(doctor_id)
        if doctor is None:
            return SchedulingResult.failure(ErrorKind.DOCTOR_NOT_FOUND, 'Doctor not found')

        if not is_working_day(doctor, day):
            # Not an error: the doctor simply has nothing to offer that day.
            return SchedulingResult.success(
                Availability(doctor=doctor, date=day, note=f'Doctor does not work on {weekday_name(day)}')
            )

        booked = self.store.find_scheduled_appointments(doctor_id, day)
        slots = [
            slot
            for slot in iterate_candidate_slots(doctor.working_hours, self.slot_minutes)
            if not any(slot_taken(slot.start_time, b.start_time, b.end_time) for b in booked)
        ]

        logger.debug('Doctor %s has %d open slots on %s', doctor_id, len(slots), day.isoformat())
        return SchedulingResult.success(Availability(doctor=doctor, date=day, slots=slots))
