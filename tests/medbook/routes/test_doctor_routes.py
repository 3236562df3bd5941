from datetime import date

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from medbook.repositories.sql_booking_store import SqlBookingStore
from medbook.routes.doctor_routes import (
    UpdateDoctorProfileRequest,
    get_doctor,
    get_doctor_availability,
    get_doctor_profile,
    list_doctors,
    update_doctor_profile,
)
from medbook.scheduling.availability import AvailabilityGenerator
from medbook.scheduling.entities import AppointmentRecord, Requester

MONDAY = date(2030, 1, 7)
DOCTOR = Requester(id=1, role='doctor')


@pytest.fixture
def store(seeded_db) -> SqlBookingStore:
    return SqlBookingStore(seeded_db)


def test_list_doctors_returns_directory(store) -> None:
    response = list_doctors(store=store)

    assert response.count == 1
    payload = response.model_dump(by_alias=True)
    assert payload['doctors'][0]['workingHours'] == {'start': '09:00', 'end': '17:00'}
    assert payload['doctors'][0]['workingDays'] == ['Monday']


def test_get_doctor_missing_is_404(store) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_doctor(77, store=store)

    assert exception_info.value.status_code == 404


def test_get_doctor_profile_for_logged_in_doctor(store) -> None:
    assert get_doctor_profile(requester=DOCTOR, store=store).doctor.name == 'Gregory House'


def test_update_profile_normalizes_days_into_calendar_order(store) -> None:
    request = UpdateDoctorProfileRequest.model_validate(
        {'workingDays': ['friday', 'Monday'], 'workingHours': {'start': '08:00', 'end': '12:30'}}
    )

    response = update_doctor_profile(request, requester=DOCTOR, store=store)

    assert response.doctor.working_days == ['Monday', 'Friday']
    assert response.doctor.working_hours.end == '12:30'


@pytest.mark.parametrize(
    'payload',
    [
        {'workingHours': {'start': '17:00', 'end': '09:00'}},
        {'workingHours': {'start': '9:00', 'end': '17:00'}},
        {'workingDays': ['Funday']},
        {'workingDays': []},
    ],
)
def test_update_profile_rejects_invalid_schedule(payload) -> None:
    with pytest.raises(ValidationError):
        UpdateDoctorProfileRequest.model_validate(payload)


def test_availability_excludes_booked_slot(store) -> None:
    store.insert_appointment(
        AppointmentRecord(
            id=None,
            patient_id=2,
            doctor_id=1,
            date=MONDAY,
            start_time='10:00',
            end_time='10:30',
            reason='Checkup',
        )
    )

    response = get_doctor_availability(1, day=MONDAY, generator=AvailabilityGenerator(store))

    payload = response.model_dump(by_alias=True)
    starts = [slot['startTime'] for slot in payload['availableSlots']]
    assert len(starts) == 15
    assert '10:00' not in starts
    assert payload['doctorName'] == 'Gregory House'


def test_availability_on_day_off_is_successful_and_empty(store) -> None:
    response = get_doctor_availability(1, day=date(2030, 1, 13), generator=AvailabilityGenerator(store))

    assert response.success is True
    assert response.available_slots == []
    assert response.message == 'Doctor does not work on Sunday'


def test_availability_unknown_doctor_is_404(store) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_doctor_availability(55, day=MONDAY, generator=AvailabilityGenerator(store))

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Doctor not found'
