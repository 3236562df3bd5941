from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from medbook.auth.dependencies import require_doctor
from medbook.repositories.sql_booking_store import SqlBookingStore
from medbook.routes.dependencies import get_availability_generator, get_store
from medbook.routes.errors import store_errors_as_http, unwrap
from medbook.scheduling.availability import AvailabilityGenerator
from medbook.scheduling.clock import is_clock_time, to_minutes
from medbook.scheduling.entities import WEEKDAY_NAMES, DoctorProfile, Requester, WorkingHours

router = APIRouter(tags=['doctors'])


class WorkingHoursModel(BaseModel):
    start: str
    end: str

    @field_validator('start', 'end')
    @classmethod
    def validate_clock(cls, value: str) -> str:
        normalized = value.strip()
        if not is_clock_time(normalized):
            raise ValueError('Working hours must use the 24-hour HH:MM format.')
        return normalized

    @model_validator(mode='after')
    def validate_order(self) -> 'WorkingHoursModel':
        if to_minutes(self.start) >= to_minutes(self.end):
            raise ValueError('Working hours must start before they end.')
        return self


class WorkingHoursResponse(BaseModel):
    start: str
    end: str


class DoctorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    specialization: str
    working_hours: WorkingHoursResponse = Field(alias='workingHours')
    working_days: list[str] = Field(alias='workingDays')

    @classmethod
    def from_profile(cls, profile: DoctorProfile) -> 'DoctorResponse':
        return cls(
            id=profile.id,
            name=profile.name,
            specialization=profile.specialization,
            working_hours=WorkingHoursResponse(start=profile.working_hours.start, end=profile.working_hours.end),
            # Keep calendar order on the wire instead of set order.
            working_days=[day for day in WEEKDAY_NAMES if day in profile.working_days],
        )


class DoctorEnvelope(BaseModel):
    success: bool = True
    doctor: DoctorResponse


class DoctorListResponse(BaseModel):
    success: bool = True
    count: int
    doctors: list[DoctorResponse]


class UpdateDoctorProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    specialization: str | None = None
    phone: str | None = None
    working_hours: WorkingHoursModel | None = Field(default=None, alias='workingHours')
    working_days: list[str] | None = Field(default=None, alias='workingDays')

    @field_validator('working_days')
    @classmethod
    def validate_working_days(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None

        normalized = [day.strip().capitalize() for day in value]
        unknown = [day for day in normalized if day not in WEEKDAY_NAMES]
        if unknown:
            raise ValueError(f'Unknown working days: {", ".join(unknown)}')
        if not normalized:
            raise ValueError('Please provide working days')

        return [day for day in WEEKDAY_NAMES if day in normalized]


class TimeSlotResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    date: date
    doctor_id: int = Field(alias='doctorId')
    doctor_name: str = Field(alias='doctorName')
    message: str | None = None
    available_slots: list[TimeSlotResponse] = Field(alias='availableSlots')


@router.get('', response_model=DoctorListResponse)
def list_doctors(store: SqlBookingStore = Depends(get_store)):
    with store_errors_as_http():
        profiles = store.list_doctors()

    doctors = [DoctorResponse.from_profile(profile) for profile in profiles]
    return DoctorListResponse(count=len(doctors), doctors=doctors)


@router.get('/profile', response_model=DoctorEnvelope)
def get_doctor_profile(
    requester: Requester = Depends(require_doctor),
    store: SqlBookingStore = Depends(get_store),
):
    with store_errors_as_http():
        profile = store.find_doctor(requester.id)

    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Doctor not found')
    return DoctorEnvelope(doctor=DoctorResponse.from_profile(profile))


@router.put('/profile', response_model=DoctorEnvelope)
def update_doctor_profile(
    data: UpdateDoctorProfileRequest,
    requester: Requester = Depends(require_doctor),
    store: SqlBookingStore = Depends(get_store),
):
    working_hours = None
    if data.working_hours is not None:
        working_hours = WorkingHours(start=data.working_hours.start, end=data.working_hours.end)

    with store_errors_as_http():
        profile = store.save_doctor_schedule(
            requester.id,
            working_hours=working_hours,
            working_days=data.working_days,
            name=data.name,
            specialization=data.specialization,
            phone=data.phone,
        )

    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Doctor not found')
    return DoctorEnvelope(doctor=DoctorResponse.from_profile(profile))


@router.get('/{doctor_id}', response_model=DoctorEnvelope)
def get_doctor(doctor_id: int, store: SqlBookingStore = Depends(get_store)):
    with store_errors_as_http():
        profile = store.find_doctor(doctor_id)

    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Doctor not found')
    return DoctorEnvelope(doctor=DoctorResponse.from_profile(profile))


@router.get('/{doctor_id}/availability', response_model=AvailabilityResponse)
def get_doctor_availability(
    doctor_id: int,
    day: date = Query(..., alias='date'),
    generator: AvailabilityGenerator = Depends(get_availability_generator),
):
    with store_errors_as_http():
        result = generator.list_available_slots(doctor_id, day)

    availability = unwrap(result)
    return AvailabilityResponse(
        date=availability.date,
        doctor_id=availability.doctor.id,
        doctor_name=availability.doctor.name,
        message=availability.note,
        available_slots=[
            TimeSlotResponse(start_time=slot.start_time, end_time=slot.end_time)
            for slot in availability.slots
        ],
    )
