from datetime import date

from medbook.scheduling.availability import AvailabilityGenerator, iterate_candidate_slots
from medbook.scheduling.entities import TimeSlot, WorkingHours
from medbook.scheduling.results import ErrorKind

MONDAY = date(2030, 1, 7)


def _book(fake_store, start, end, status='scheduled'):
    return fake_store.add_appointment(
        patient_id=20,
        doctor_id=1,
        date=MONDAY,
        start_time=start,
        end_time=end,
        reason='Checkup',
        status=status,
    )


def test_candidate_slots_start_at_window_start() -> None:
    slots = list(iterate_candidate_slots(WorkingHours(start='09:15', end='10:45')))

    assert slots == [
        TimeSlot('09:15', '09:45'),
        TimeSlot('09:45', '10:15'),
        TimeSlot('10:15', '10:45'),
    ]


def test_candidate_slots_drop_trailing_partial_slot() -> None:
    slots = list(iterate_candidate_slots(WorkingHours(start='09:00', end='10:20')))

    assert [slot.start_time for slot in slots] == ['09:00', '09:30']


def test_candidate_slots_honour_custom_duration() -> None:
    slots = list(iterate_candidate_slots(WorkingHours(start='09:00', end='10:00'), slot_minutes=15))

    assert len(slots) == 4


def test_worked_example_hides_only_booked_slot(fake_store) -> None:
    fake_store.add_doctor(doctor_id=1, working_days=('Monday',), start='09:00', end='17:00')
    _book(fake_store, '10:00', '10:30')

    availability = AvailabilityGenerator(fake_store).list_available_slots(1, MONDAY).value

    assert len(availability.slots) == 15
    assert TimeSlot('10:00', '10:30') not in availability.slots
    assert availability.slots[0] == TimeSlot('09:00', '09:30')
    assert availability.slots[-1] == TimeSlot('16:30', '17:00')
    assert availability.note is None


def test_long_booking_hides_every_slot_it_spans(fake_store) -> None:
    fake_store.add_doctor(doctor_id=1, start='09:00', end='12:00')
    _book(fake_store, '09:30', '11:00')

    availability = AvailabilityGenerator(fake_store).list_available_slots(1, MONDAY).value

    assert [slot.start_time for slot in availability.slots] == ['09:00', '11:00', '11:30']


def test_booking_starting_mid_slot_leaves_slot_listed(fake_store) -> None:
    fake_store.add_doctor(doctor_id=1, start='09:00', end='11:00')
    _book(fake_store, '09:15', '09:45')

    availability = AvailabilityGenerator(fake_store).list_available_slots(1, MONDAY).value

    # 09:00 stays listed even though booking it would now conflict.
    assert [slot.start_time for slot in availability.slots] == ['09:00', '10:00', '10:30']


def test_cancelled_bookings_do_not_hide_slots(fake_store) -> None:
    fake_store.add_doctor(doctor_id=1, start='09:00', end='10:00')
    _book(fake_store, '09:00', '09:30', status='cancelled')

    availability = AvailabilityGenerator(fake_store).list_available_slots(1, MONDAY).value

    assert len(availability.slots) == 2


def test_non_working_day_is_empty_success_with_note(fake_store) -> None:
    fake_store.add_doctor(doctor_id=1, working_days=('Monday',))

    result = AvailabilityGenerator(fake_store).list_available_slots(1, date(2030, 1, 8))

    assert result.ok
    assert result.value.slots == []
    assert result.value.note == 'Doctor does not work on Tuesday'


def test_unknown_doctor_is_an_error(fake_store) -> None:
    result = AvailabilityGenerator(fake_store).list_available_slots(42, MONDAY)

    assert result.error.kind == ErrorKind.DOCTOR_NOT_FOUND
