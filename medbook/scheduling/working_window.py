from datetime import date

from medbook.scheduling.clock import to_minutes
from medbook.scheduling.entities import WEEKDAY_NAMES, DoctorProfile


def weekday_name(day: date) -> str:
    # Index into a fixed table so the result never depends on the process locale.
    return WEEKDAY_NAMES[day.weekday()]


def is_working_day(doctor: DoctorProfile, day: date) -> bool:
    return weekday_name(day) in doctor.working_days


def is_within_working_hours(doctor: DoctorProfile, start_time: str, end_time: str) -> bool:
    appointment_start = to_minutes(start_time)
    appointment_end = to_minutes(end_time)
    doctor_start = to_minutes(doctor.working_hours.start)
    doctor_end = to_minutes(doctor.working_hours.end)

    return (
        doctor_start <= appointment_start
        and appointment_end <= doctor_end
        and appointment_start < appointment_end
    )
