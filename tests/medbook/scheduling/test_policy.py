from datetime import date

import pytest

from medbook.scheduling import policy
from medbook.scheduling.entities import AppointmentRecord, Requester

DOCTOR = Requester(id=10, role='doctor')
PATIENT = Requester(id=20, role='patient')
ADMIN = Requester(id=30, role='admin')
OTHER_DOCTOR = Requester(id=11, role='doctor')
OTHER_PATIENT = Requester(id=21, role='patient')


@pytest.fixture
def appointment() -> AppointmentRecord:
    return AppointmentRecord(
        id=1,
        patient_id=20,
        doctor_id=10,
        date=date(2030, 1, 7),
        start_time='10:00',
        end_time='10:30',
        reason='Checkup',
    )


def test_relationships_identify_assigned_parties(appointment) -> None:
    assert policy.relationships(DOCTOR, appointment) == {policy.ASSIGNED_DOCTOR}
    assert policy.relationships(PATIENT, appointment) == {policy.ASSIGNED_PATIENT}
    assert policy.relationships(ADMIN, appointment) == {policy.UNRELATED}


def test_patient_id_match_is_not_mistaken_for_doctor(appointment) -> None:
    # Same numeric id as the doctor but a patient role: not the assigned doctor.
    impostor = Requester(id=10, role='patient')

    assert policy.relationships(impostor, appointment) == {policy.UNRELATED}


@pytest.mark.parametrize(
    ('requester', 'allowed'),
    [(DOCTOR, True), (PATIENT, False), (ADMIN, False), (OTHER_DOCTOR, False)],
)
def test_only_assigned_doctor_may_complete(appointment, requester, allowed) -> None:
    assert policy.is_allowed(policy.COMPLETE, requester, appointment) is allowed


@pytest.mark.parametrize(
    ('requester', 'allowed'),
    [(DOCTOR, True), (PATIENT, True), (ADMIN, True), (OTHER_DOCTOR, False), (OTHER_PATIENT, False)],
)
def test_cancel_allowed_for_participants_and_admins(appointment, requester, allowed) -> None:
    assert policy.is_allowed(policy.CANCEL, requester, appointment) is allowed


def test_doctor_booking_as_patient_can_cancel_own_booking(appointment) -> None:
    colleague = Requester(id=20, role='doctor')

    assert policy.is_allowed(policy.CANCEL, colleague, appointment) is True
    assert policy.is_allowed(policy.COMPLETE, colleague, appointment) is False


def test_every_status_has_an_operation() -> None:
    assert set(policy.STATUS_OPERATIONS) == {'scheduled', 'completed', 'cancelled'}
