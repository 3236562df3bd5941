import logging
from contextlib import contextmanager
from datetime import date
from threading import Lock
from typing import Callable, Iterator, Optional

from medbook.scheduling import policy
from medbook.scheduling.entities import (
    APPOINTMENT_STATUSES,
    ROLE_DOCTOR,
    ROLE_PATIENT,
    STATUS_COMPLETED,
    STATUS_SCHEDULED,
    TERMINAL_STATUSES,
    AppointmentPatch,
    AppointmentRecord,
    DoctorProfile,
    Requester,
)
from medbook.scheduling.metrics import MetricsRecorder, NullMetricsRecorder
from medbook.scheduling.overlap import booking_conflicts
from medbook.scheduling.ports import BookingStore, BookingStoreError, SlotAlreadyTakenError
from medbook.scheduling.results import ErrorKind, SchedulingResult
from medbook.scheduling.working_window import is_within_working_hours, is_working_day, weekday_name

logger = logging.getLogger(__name__)

SLOT_CONFLICT_MESSAGE = 'This time slot is already booked'


class BookingLocks:
    """Serialises read-check-write per (doctor, date).

    A fixed pool of striped locks keeps memory bounded; unrelated doctor/date
    pairs occasionally share a stripe, which only costs some parallelism.
    """

    def __init__(self, stripes: int = 64) -> None:
        self._locks = [Lock() for _ in range(stripes)]

    @contextmanager
    def hold(self, doctor_id: int, day: date) -> Iterator[None]:
        lock = self._locks[hash((doctor_id, day)) % len(self._locks)]
        with lock:
            yield


class AppointmentScheduler:
    """Validates and records bookings against a doctor's working window."""

    def __init__(
        self,
        store: BookingStore,
        metrics: Optional[MetricsRecorder] = None,
        today: Callable[[], date] = date.today,
        locks: Optional[BookingLocks] = None,
    ) -> None:
        self.store = store
        self.metrics = metrics or NullMetricsRecorder()
        self.today = today
        self.locks = locks or BookingLocks()

    def validate_and_create(
        self,
        doctor_id: int,
        day: date,
        start_time: str,
        end_time: str,
        reason: str,
        requester: Requester,
        notes: Optional[str] = None,
    ) -> SchedulingResult[AppointmentRecord]:
        doctor = self.store.find_doctor(doctor_id)
        if doctor is None:
            return self._reject(ErrorKind.DOCTOR_NOT_FOUND, 'Doctor not found')

        with self.locks.hold(doctor_id, day):
            rejection = self._check_schedule(doctor, day, start_time, end_time)
            if rejection is not None:
                return rejection

            candidate = AppointmentRecord(
                id=None,
                patient_id=requester.id,
                doctor_id=doctor_id,
                date=day,
                start_time=start_time,
                end_time=end_time,
                reason=reason,
                notes=notes or '',
                status=STATUS_SCHEDULED,
                created_by=ROLE_DOCTOR if requester.role == ROLE_DOCTOR else ROLE_PATIENT,
            )
            try:
                appointment = self.store.insert_appointment(candidate)
            except SlotAlreadyTakenError:
                return self._reject(ErrorKind.SLOT_CONFLICT, SLOT_CONFLICT_MESSAGE)

        self.metrics.appointment_created(appointment.created_by)
        self._refresh_active_appointments()
        logger.info(
            'Appointment created: ID %s for patient %s with doctor %s',
            appointment.id,
            appointment.patient_id,
            appointment.doctor_id,
        )
        return SchedulingResult.success(appointment)

    def get_appointment(self, appointment_id: int, requester: Requester) -> SchedulingResult[AppointmentRecord]:
        appointment = self.store.find_appointment_by_id(appointment_id)
        if appointment is None:
            return SchedulingResult.failure(ErrorKind.APPOINTMENT_NOT_FOUND, 'Appointment not found')

        if not policy.is_allowed(policy.VIEW, requester, appointment):
            return SchedulingResult.failure(
                ErrorKind.NOT_AUTHORIZED,
                'Not authorized to access this appointment',
            )

        return SchedulingResult.success(appointment)

    def validate_and_update(
        self,
        appointment_id: int,
        patch: AppointmentPatch,
        requester: Requester,
    ) -> SchedulingResult[AppointmentRecord]:
        appointment = self.store.find_appointment_by_id(appointment_id)
        if appointment is None:
            return SchedulingResult.failure(ErrorKind.APPOINTMENT_NOT_FOUND, 'Appointment not found')

        if not policy.is_allowed(policy.UPDATE, requester, appointment):
            return SchedulingResult.failure(
                ErrorKind.NOT_AUTHORIZED,
                'Not authorized to update this appointment',
            )

        if appointment.status != STATUS_SCHEDULED:
            return self._reject(
                ErrorKind.INVALID_STATE_TRANSITION,
                f'Cannot update a {appointment.status} appointment',
            )

        updated = appointment.copy()
        if patch.reason is not None:
            updated.reason = patch.reason
        if patch.notes is not None:
            updated.notes = patch.notes

        if not patch.touches_schedule():
            saved = self.store.save_appointment(updated)
            logger.info('Appointment ID %s details updated', saved.id)
            return SchedulingResult.success(saved)

        updated.date = patch.date if patch.date is not None else appointment.date
        updated.start_time = patch.start_time if patch.start_time is not None else appointment.start_time
        updated.end_time = patch.end_time if patch.end_time is not None else appointment.end_time

        # The doctor always comes from the stored booking, never the caller.
        doctor = self.store.find_doctor(appointment.doctor_id)
        if doctor is None:
            return self._reject(ErrorKind.DOCTOR_NOT_FOUND, 'Doctor not found')

        with self.locks.hold(doctor.id, updated.date):
            rejection = self._check_schedule(
                doctor,
                updated.date,
                updated.start_time,
                updated.end_time,
                exclude_id=appointment.id,
            )
            if rejection is not None:
                return rejection

            try:
                saved = self.store.save_appointment(updated)
            except SlotAlreadyTakenError:
                return self._reject(ErrorKind.SLOT_CONFLICT, SLOT_CONFLICT_MESSAGE)

        logger.info(
            'Appointment ID %s rescheduled to %s %s-%s',
            saved.id,
            saved.date.isoformat(),
            saved.start_time,
            saved.end_time,
        )
        return SchedulingResult.success(saved)

    def update_status(
        self,
        appointment_id: int,
        new_status: str,
        requester: Requester,
        notes: Optional[str] = None,
    ) -> SchedulingResult[AppointmentRecord]:
        if new_status not in APPOINTMENT_STATUSES:
            return SchedulingResult.failure(ErrorKind.INVALID_STATUS, 'Invalid status value')

        appointment = self.store.find_appointment_by_id(appointment_id)
        if appointment is None:
            return SchedulingResult.failure(ErrorKind.APPOINTMENT_NOT_FOUND, 'Appointment not found')

        if not policy.is_allowed(policy.VIEW, requester, appointment):
            return SchedulingResult.failure(
                ErrorKind.NOT_AUTHORIZED,
                'Not authorized to update this appointment',
            )

        if not policy.is_allowed(policy.STATUS_OPERATIONS[new_status], requester, appointment):
            if new_status == STATUS_COMPLETED:
                message = 'Only doctors can mark appointments as completed'
            else:
                message = f'Not authorized to mark this appointment as {new_status}'
            return SchedulingResult.failure(ErrorKind.NOT_AUTHORIZED, message)

        if appointment.status in TERMINAL_STATUSES:
            return SchedulingResult.failure(
                ErrorKind.INVALID_STATE_TRANSITION,
                f'Cannot change the status of a {appointment.status} appointment',
            )

        updated = appointment.copy(status=new_status)
        if notes is not None:
            updated.notes = notes
        saved = self.store.save_appointment(updated)

        self.metrics.status_changed(new_status)
        self._refresh_active_appointments()
        logger.info(
            'Appointment ID %s status updated to %s by %s %s',
            saved.id,
            new_status,
            requester.role,
            requester.id,
        )
        return SchedulingResult.success(saved)

    def _check_schedule(
        self,
        doctor: DoctorProfile,
        day: date,
        start_time: str,
        end_time: str,
        exclude_id: Optional[int] = None,
    ) -> Optional[SchedulingResult[AppointmentRecord]]:
        if day < self.today():
            return self._reject(ErrorKind.PAST_DATE, 'Cannot book appointments in the past')

        if not is_working_day(doctor, day):
            return self._reject(ErrorKind.NON_WORKING_DAY, f'Doctor does not work on {weekday_name(day)}')

        if not is_within_working_hours(doctor, start_time, end_time):
            return self._reject(
                ErrorKind.OUTSIDE_WORKING_HOURS,
                'Appointment time is outside doctor working hours or invalid',
            )

        existing = self.store.find_scheduled_appointments(doctor.id, day, exclude_id=exclude_id)
        for booked in existing:
            if booking_conflicts(start_time, end_time, booked.start_time, booked.end_time):
                return self._reject(ErrorKind.SLOT_CONFLICT, SLOT_CONFLICT_MESSAGE)

        return None

    def _reject(self, kind: ErrorKind, message: str) -> SchedulingResult[AppointmentRecord]:
        logger.info('Booking rejected (%s): %s', kind.value, message)
        self.metrics.booking_rejected(kind.value)
        return SchedulingResult.failure(kind, message)

    def _refresh_active_appointments(self) -> None:
        try:
            self.metrics.set_active_appointments(self.store.count_scheduled_appointments())
        except BookingStoreError:
            logger.exception('Error updating appointment metrics')
