"""SQLAlchemy-backed Booking Store."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from medbook.database import SCHEDULED_START_INDEX
from medbook.models.appointment import Appointment
from medbook.models.doctor import Doctor
from medbook.scheduling.entities import (
    STATUS_SCHEDULED,
    AppointmentRecord,
    DoctorProfile,
    WorkingHours,
)
from medbook.scheduling.ports import BookingStoreError, SlotAlreadyTakenError

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE_MESSAGE = 'Database unavailable. Verify DATABASE_URL and database credentials.'
SCHEDULED_START_COLUMNS = 'appointments.doctor_id, appointments.date, appointments.start_time'


def _is_scheduled_start_violation(exc: IntegrityError) -> bool:
    # Postgres names the index; SQLite only lists the indexed columns.
    message = str(exc.orig)
    return SCHEDULED_START_INDEX in message or SCHEDULED_START_COLUMNS in message


def to_doctor_profile(doctor: Doctor) -> DoctorProfile:
    return DoctorProfile(
        id=doctor.id,
        name=doctor.name or '',
        specialization=doctor.specialization or '',
        working_days=frozenset(doctor.working_days or []),
        working_hours=WorkingHours(start=doctor.working_hours_start, end=doctor.working_hours_end),
    )


def to_appointment_record(appointment: Appointment) -> AppointmentRecord:
    return AppointmentRecord(
        id=appointment.id,
        patient_id=appointment.patient_id,
        doctor_id=appointment.doctor_id,
        date=appointment.date,
        start_time=appointment.start_time,
        end_time=appointment.end_time,
        status=appointment.status or STATUS_SCHEDULED,
        reason=appointment.reason or '',
        notes=appointment.notes or '',
        created_by=appointment.created_by,
        created_at=appointment.created_at,
    )


class SqlBookingStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_doctor(self, doctor_id: int) -> Optional[DoctorProfile]:
        try:
            doctor = self.db.get(Doctor, doctor_id)
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc
        return to_doctor_profile(doctor) if doctor else None

    def find_scheduled_appointments(
        self,
        doctor_id: int,
        day: date,
        exclude_id: Optional[int] = None,
    ) -> list[AppointmentRecord]:
        try:
            query = self.db.query(Appointment).filter(
                Appointment.doctor_id == doctor_id,
                Appointment.date == day,
                Appointment.status == STATUS_SCHEDULED,
            )
            if exclude_id is not None:
                query = query.filter(Appointment.id != exclude_id)
            appointments = query.order_by(Appointment.start_time.asc()).all()
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc

        return [to_appointment_record(appointment) for appointment in appointments]

    def insert_appointment(self, appointment: AppointmentRecord) -> AppointmentRecord:
        row = Appointment(
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            date=appointment.date,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            status=appointment.status,
            reason=appointment.reason,
            notes=appointment.notes,
            created_by=appointment.created_by,
        )
        self._commit(row)
        return to_appointment_record(row)

    def find_appointment_by_id(self, appointment_id: int) -> Optional[AppointmentRecord]:
        try:
            row = self.db.get(Appointment, appointment_id)
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc
        return to_appointment_record(row) if row else None

    def save_appointment(self, appointment: AppointmentRecord) -> AppointmentRecord:
        try:
            row = self.db.get(Appointment, appointment.id)
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc
        if row is None:
            raise BookingStoreError(f'Appointment {appointment.id} disappeared before it could be saved')

        row.date = appointment.date
        row.start_time = appointment.start_time
        row.end_time = appointment.end_time
        row.status = appointment.status
        row.reason = appointment.reason
        row.notes = appointment.notes
        self._commit(row)
        return to_appointment_record(row)

    def count_scheduled_appointments(self) -> int:
        try:
            return self.db.query(Appointment).filter(Appointment.status == STATUS_SCHEDULED).count()
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc

    def list_appointments_for_patient(self, patient_id: int, status: Optional[str] = None) -> list[AppointmentRecord]:
        try:
            query = self.db.query(Appointment).filter(Appointment.patient_id == patient_id)
            if status:
                query = query.filter(Appointment.status == status)
            rows = query.order_by(Appointment.date.asc(), Appointment.start_time.asc()).all()
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc
        return [to_appointment_record(row) for row in rows]

    def list_appointments_for_doctor(
        self,
        doctor_id: int,
        status: Optional[str] = None,
        day: Optional[date] = None,
    ) -> list[AppointmentRecord]:
        try:
            query = self.db.query(Appointment).filter(Appointment.doctor_id == doctor_id)
            if status:
                query = query.filter(Appointment.status == status)
            if day is not None:
                query = query.filter(Appointment.date == day)
            rows = query.order_by(Appointment.date.asc(), Appointment.start_time.asc()).all()
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc
        return [to_appointment_record(row) for row in rows]

    def list_doctors(self) -> list[DoctorProfile]:
        try:
            doctors = self.db.query(Doctor).order_by(Doctor.name.asc()).all()
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc
        return [to_doctor_profile(doctor) for doctor in doctors]

    def save_doctor_schedule(
        self,
        doctor_id: int,
        working_hours: Optional[WorkingHours] = None,
        working_days: Optional[list[str]] = None,
        **details: Optional[str],
    ) -> Optional[DoctorProfile]:
        try:
            doctor = self.db.get(Doctor, doctor_id)
        except SQLAlchemyError as exc:
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc
        if doctor is None:
            return None

        if working_hours is not None:
            doctor.working_hours_start = working_hours.start
            doctor.working_hours_end = working_hours.end
        if working_days is not None:
            doctor.working_days = list(working_days)
        for field_name in ('name', 'specialization', 'phone'):
            value = details.get(field_name)
            if value:
                setattr(doctor, field_name, value)

        self._commit(doctor)
        return to_doctor_profile(doctor)

    def _commit(self, row) -> None:
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except IntegrityError as exc:
            self.db.rollback()
            if not (isinstance(row, Appointment) and _is_scheduled_start_violation(exc)):
                logger.error('Store rejected %s row: %s', type(row).__name__, exc.orig)
                raise BookingStoreError(str(exc.orig)) from exc
            logger.info('Store rejected a duplicate scheduled booking: %s', exc.orig)
            raise SlotAlreadyTakenError('This time slot is already booked') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise BookingStoreError(STORE_UNAVAILABLE_MESSAGE) from exc
