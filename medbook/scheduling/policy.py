"""Who may do what to an appointment.

Rules are looked up by ``(operation, requester role, relationship)``.
Anything not listed is denied.
"""

from medbook.scheduling.entities import (
    ROLE_ADMIN,
    ROLE_DOCTOR,
    ROLE_PATIENT,
    AppointmentRecord,
    Requester,
)

VIEW = 'view'
UPDATE = 'update'
SCHEDULE = 'mark_scheduled'
COMPLETE = 'mark_completed'
CANCEL = 'mark_cancelled'

ASSIGNED_DOCTOR = 'assigned_doctor'
ASSIGNED_PATIENT = 'assigned_patient'
UNRELATED = 'unrelated'

_PARTICIPANTS = {
    (ROLE_DOCTOR, ASSIGNED_DOCTOR),
    (ROLE_PATIENT, ASSIGNED_PATIENT),
    # A doctor can book with a colleague and is then that booking's patient.
    (ROLE_DOCTOR, ASSIGNED_PATIENT),
    (ROLE_ADMIN, ASSIGNED_PATIENT),
    (ROLE_ADMIN, UNRELATED),
}

POLICY: dict[tuple[str, str, str], bool] = {
    **{(VIEW, role, relation): True for role, relation in _PARTICIPANTS},
    **{(UPDATE, role, relation): True for role, relation in _PARTICIPANTS},
    **{(SCHEDULE, role, relation): True for role, relation in _PARTICIPANTS},
    **{(CANCEL, role, relation): True for role, relation in _PARTICIPANTS},
    (COMPLETE, ROLE_DOCTOR, ASSIGNED_DOCTOR): True,
}

STATUS_OPERATIONS = {
    'scheduled': SCHEDULE,
    'completed': COMPLETE,
    'cancelled': CANCEL,
}


def relationships(requester: Requester, appointment: AppointmentRecord) -> set[str]:
    found = set()
    if requester.role == ROLE_DOCTOR and requester.id == appointment.doctor_id:
        found.add(ASSIGNED_DOCTOR)
    if requester.id == appointment.patient_id:
        found.add(ASSIGNED_PATIENT)
    return found or {UNRELATED}


def is_allowed(operation: str, requester: Requester, appointment: AppointmentRecord) -> bool:
    return any(
        POLICY.get((operation, requester.role, relation), False)
        for relation in relationships(requester, appointment)
    )
