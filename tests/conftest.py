import os
from datetime import date
from itertools import count
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from medbook.database import Base, ensure_appointment_schema  # noqa: E402
from medbook.models.appointment import Appointment  # noqa: E402
from medbook.models.doctor import Doctor  # noqa: E402
from medbook.models.user import User  # noqa: E402
from medbook.scheduling.entities import (  # noqa: E402
    STATUS_SCHEDULED,
    AppointmentRecord,
    DoctorProfile,
    WorkingHours,
)


class FakeBookingStore:
    def __init__(self) -> None:
        self._ids = count(1)
        self.doctors: dict[int, DoctorProfile] = {}
        self.appointments: dict[int, AppointmentRecord] = {}
        self.saved: list[AppointmentRecord] = []

    def add_doctor(
        self,
        doctor_id: int = 1,
        working_days=('Monday',),
        start: str = '09:00',
        end: str = '17:00',
        name: str = 'Dr. House',
    ) -> DoctorProfile:
        profile = DoctorProfile(
            id=doctor_id,
            name=name,
            working_days=frozenset(working_days),
            working_hours=WorkingHours(start=start, end=end),
        )
        self.doctors[doctor_id] = profile
        return profile

    def add_appointment(self, **fields) -> AppointmentRecord:
        record = AppointmentRecord(id=next(self._ids), **fields)
        self.appointments[record.id] = record
        return record

    def find_doctor(self, doctor_id: int) -> Optional[DoctorProfile]:
        return self.doctors.get(doctor_id)

    def find_scheduled_appointments(self, doctor_id: int, day: date, exclude_id: Optional[int] = None):
        return [
            record
            for record in self.appointments.values()
            if record.doctor_id == doctor_id
            and record.date == day
            and record.status == STATUS_SCHEDULED
            and record.id != exclude_id
        ]

    def insert_appointment(self, appointment: AppointmentRecord) -> AppointmentRecord:
        record = appointment.copy(id=next(self._ids))
        self.appointments[record.id] = record
        return record.copy()

    def find_appointment_by_id(self, appointment_id: int) -> Optional[AppointmentRecord]:
        record = self.appointments.get(appointment_id)
        return record.copy() if record else None

    def save_appointment(self, appointment: AppointmentRecord) -> AppointmentRecord:
        self.appointments[appointment.id] = appointment.copy()
        self.saved.append(appointment.copy())
        return appointment.copy()

    def count_scheduled_appointments(self) -> int:
        return sum(1 for record in self.appointments.values() if record.status == STATUS_SCHEDULED)


@pytest.fixture
def fake_store() -> FakeBookingStore:
    return FakeBookingStore()


@pytest.fixture
def db_engine():
    engine = create_engine('sqlite:///:memory:')
    tables = [User.__table__, Doctor.__table__, Appointment.__table__]
    Base.metadata.create_all(bind=engine, tables=tables)
    ensure_appointment_schema(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(tables)))
        engine.dispose()


@pytest.fixture
def appointment_db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def seeded_db(appointment_db):
    """One Monday-only doctor (id 1, 09:00-17:00), two patients and an admin."""
    appointment_db.add_all(
        [
            User(id=1, email='house@clinic.test', name='Gregory House', role='doctor'),
            User(id=2, email='patient@example.test', name='Pat Ient', role='patient'),
            User(id=3, email='other@example.test', name='Other Patient', role='patient'),
            User(id=4, email='admin@clinic.test', name='Admin', role='admin'),
        ]
    )
    appointment_db.flush()
    appointment_db.add(
        Doctor(
            id=1,
            name='Gregory House',
            specialization='Diagnostics',
            phone='555-0100',
            license_number='LIC-1',
            working_hours_start='09:00',
            working_hours_end='17:00',
            working_days=['Monday'],
        )
    )
    appointment_db.commit()
    return appointment_db
