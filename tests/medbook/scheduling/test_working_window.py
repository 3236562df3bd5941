from datetime import date

import pytest

from medbook.scheduling.clock import from_minutes, is_clock_time, to_minutes
from medbook.scheduling.entities import DoctorProfile, WorkingHours
from medbook.scheduling.working_window import is_within_working_hours, is_working_day, weekday_name

MONDAY = date(2030, 1, 7)


def _doctor(days=('Monday', 'Wednesday'), start='09:00', end='17:00') -> DoctorProfile:
    return DoctorProfile(
        id=1,
        name='Dr. Who',
        working_days=frozenset(days),
        working_hours=WorkingHours(start=start, end=end),
    )


def test_weekday_name_uses_english_names() -> None:
    assert weekday_name(MONDAY) == 'Monday'
    assert weekday_name(date(2030, 1, 13)) == 'Sunday'


def test_is_working_day_checks_weekday_membership() -> None:
    doctor = _doctor()

    assert is_working_day(doctor, MONDAY) is True
    assert is_working_day(doctor, date(2030, 1, 9)) is True
    assert is_working_day(doctor, date(2030, 1, 8)) is False


@pytest.mark.parametrize(
    ('start_time', 'end_time', 'expected'),
    [
        ('09:00', '17:00', True),
        ('09:00', '09:30', True),
        ('16:30', '17:00', True),
        ('08:30', '09:30', False),
        ('16:30', '17:30', False),
        ('10:00', '10:00', False),
        ('11:00', '10:00', False),
    ],
)
def test_is_within_working_hours(start_time: str, end_time: str, expected: bool) -> None:
    assert is_within_working_hours(_doctor(), start_time, end_time) is expected


def test_working_hours_compare_as_minutes() -> None:
    doctor = _doctor(start='9:00', end='17:00')

    assert is_within_working_hours(doctor, '10:00', '10:30') is True


def test_clock_helpers_round_trip_edges() -> None:
    assert to_minutes('00:00') == 0
    assert to_minutes('23:59') == 1439
    assert from_minutes(570) == '09:30'
    assert from_minutes(24 * 60) == '24:00'


@pytest.mark.parametrize('value', ['24:00', '9:00', '12:60', 'noon', ''])
def test_is_clock_time_rejects_malformed_values(value: str) -> None:
    assert is_clock_time(value) is False


@pytest.mark.parametrize('value', ['25:00', '10:75', 'ten', None])
def test_to_minutes_rejects_garbage(value) -> None:
    with pytest.raises(ValueError):
        to_minutes(value)
