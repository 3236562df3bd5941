from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from medbook.auth.dependencies import get_requester, require_doctor
from medbook.core import config
from medbook.repositories.sql_booking_store import SqlBookingStore
from medbook.routes.dependencies import get_scheduler, get_store
from medbook.routes.errors import store_errors_as_http, unwrap
from medbook.scheduling.clock import is_clock_time
from medbook.scheduling.entities import (
    APPOINTMENT_STATUSES,
    AppointmentPatch,
    AppointmentRecord,
    Requester,
)
from medbook.scheduling.scheduler import AppointmentScheduler

router = APIRouter(tags=['appointments'])


def _normalize_clock(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    if not is_clock_time(normalized):
        raise ValueError('Time must use the 24-hour HH:MM format.')
    return normalized


def _normalize_notes(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValueError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

    return normalized


class CreateAppointmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    doctor: int
    date: date
    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')
    reason: str
    notes: str | None = None

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_clock(cls, value: str) -> str:
        return _normalize_clock(value)

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Please provide a reason for the appointment.')
        return normalized

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class UpdateAppointmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: date | None = Field(default=None, alias='date')
    start_time: str | None = Field(default=None, alias='startTime')
    end_time: str | None = Field(default=None, alias='endTime')
    reason: str | None = None
    notes: str | None = None

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_clock(cls, value: str | None) -> str | None:
        return _normalize_clock(value)

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)

    def to_patch(self) -> AppointmentPatch:
        return AppointmentPatch(
            date=self.day,
            start_time=self.start_time,
            end_time=self.end_time,
            reason=self.reason,
            notes=self.notes,
        )


class UpdateStatusRequest(BaseModel):
    status: str
    notes: str | None = None

    @field_validator('status')
    @classmethod
    def normalize_status(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    patient: int
    doctor: int
    date: date
    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')
    status: str
    reason: str
    notes: str = ''
    created_by: str = Field(alias='createdBy')
    created_at: datetime | None = Field(default=None, alias='createdAt')

    @classmethod
    def from_record(cls, record: AppointmentRecord) -> 'AppointmentResponse':
        return cls(
            id=record.id,
            patient=record.patient_id,
            doctor=record.doctor_id,
            date=record.date,
            start_time=record.start_time,
            end_time=record.end_time,
            status=record.status,
            reason=record.reason,
            notes=record.notes,
            created_by=record.created_by,
            created_at=record.created_at,
        )


class AppointmentEnvelope(BaseModel):
    success: bool = True
    appointment: AppointmentResponse


class AppointmentListResponse(BaseModel):
    success: bool = True
    count: int
    appointments: list[AppointmentResponse]


def _list_response(records: list[AppointmentRecord]) -> AppointmentListResponse:
    appointments = [AppointmentResponse.from_record(record) for record in records]
    return AppointmentListResponse(count=len(appointments), appointments=appointments)


def _validate_status_filter(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized not in APPOINTMENT_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid status value')
    return normalized


@router.post('', response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    requester: Requester = Depends(get_requester),
    scheduler: AppointmentScheduler = Depends(get_scheduler),
):
    with store_errors_as_http():
        result = scheduler.validate_and_create(
            doctor_id=data.doctor,
            day=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            reason=data.reason,
            requester=requester,
            notes=data.notes,
        )

    return AppointmentEnvelope(appointment=AppointmentResponse.from_record(unwrap(result)))


@router.get('', response_model=AppointmentListResponse)
def list_my_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    requester: Requester = Depends(get_requester),
    store: SqlBookingStore = Depends(get_store),
):
    normalized_status = _validate_status_filter(status_filter)

    with store_errors_as_http():
        records = store.list_appointments_for_patient(requester.id, status=normalized_status)

    return _list_response(records)


@router.get('/doctor', response_model=AppointmentListResponse)
def list_doctor_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    day: date | None = Query(default=None, alias='date'),
    requester: Requester = Depends(require_doctor),
    store: SqlBookingStore = Depends(get_store),
):
    normalized_status = _validate_status_filter(status_filter)

    with store_errors_as_http():
        records = store.list_appointments_for_doctor(requester.id, status=normalized_status, day=day)

    return _list_response(records)


@router.get('/{appointment_id}', response_model=AppointmentEnvelope)
def get_appointment(
    appointment_id: int,
    requester: Requester = Depends(get_requester),
    scheduler: AppointmentScheduler = Depends(get_scheduler),
):
    with store_errors_as_http():
        result = scheduler.get_appointment(appointment_id, requester)

    return AppointmentEnvelope(appointment=AppointmentResponse.from_record(unwrap(result)))


@router.put('/{appointment_id}', response_model=AppointmentEnvelope)
def update_appointment(
    appointment_id: int,
    data: UpdateAppointmentRequest,
    requester: Requester = Depends(get_requester),
    scheduler: AppointmentScheduler = Depends(get_scheduler),
):
    with store_errors_as_http():
        result = scheduler.validate_and_update(appointment_id, data.to_patch(), requester)

    return AppointmentEnvelope(appointment=AppointmentResponse.from_record(unwrap(result)))


@router.patch('/{appointment_id}/status', response_model=AppointmentEnvelope)
def update_appointment_status(
    appointment_id: int,
    data: UpdateStatusRequest,
    requester: Requester = Depends(get_requester),
    scheduler: AppointmentScheduler = Depends(get_scheduler),
):
    with store_errors_as_http():
        result = scheduler.update_status(appointment_id, data.status, requester, notes=data.notes)

    return AppointmentEnvelope(appointment=AppointmentResponse.from_record(unwrap(result)))
