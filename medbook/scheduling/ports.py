from datetime import date
from typing import Optional, Protocol

from medbook.scheduling.entities import AppointmentRecord, DoctorProfile


class BookingStoreError(Exception):
    """Storage failed (timeout, lost connection). Not a scheduling rejection."""


class SlotAlreadyTakenError(BookingStoreError):
    """The store's own uniqueness guard rejected a scheduled booking."""


class BookingStore(Protocol):
    def find_doctor(self, doctor_id: int) -> Optional[DoctorProfile]:
        ...

    def find_scheduled_appointments(
        self,
        doctor_id: int,
        day: date,
        exclude_id: Optional[int] = None,
    ) -> list[AppointmentRecord]:
        ...

    def insert_appointment(self, appointment: AppointmentRecord) -> AppointmentRecord:
        ...

    def find_appointment_by_id(self, appointment_id: int) -> Optional[AppointmentRecord]:
        ...

    def save_appointment(self, appointment: AppointmentRecord) -> AppointmentRecord:
        ...

    def count_scheduled_appointments(self) -> int:
        ...
