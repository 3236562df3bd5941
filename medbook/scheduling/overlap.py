"""Interval conflict rules.

All intervals are half-open ``[start, end)`` on a single calendar day and are
given as ``HH:MM`` strings.
"""

from medbook.scheduling.clock import to_minutes


def _bounds(start_time: str, end_time: str) -> tuple[int, int]:
    return to_minutes(start_time), to_minutes(end_time)


def booking_conflicts(
    proposed_start: str,
    proposed_end: str,
    existing_start: str,
    existing_end: str,
) -> bool:
    """Return True when a proposed booking collides with an existing one.

    A proposal conflicts when any of these holds:

    * it starts at the same minute as the existing booking;
    * its start falls strictly inside the existing booking;
    * its end falls strictly inside the existing booking;
    * it strictly contains the existing booking.

    The rule is not symmetric. A proposal that starts before an existing
    booking and ends exactly when it ends (09:45-10:30 against 10:00-10:30)
    matches none of the cases.
    """
    a_start, a_end = _bounds(proposed_start, proposed_end)
    b_start, b_end = _bounds(existing_start, existing_end)

    return (
        a_start == b_start
        or b_start < a_start < b_end
        or b_start < a_end < b_end
        or (a_start < b_start and a_end > b_end)
    )


def intervals_overlap(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    """Symmetric half-open overlap test: ``a.start < b.end and b.start < a.end``."""
    a_start_minutes, a_end_minutes = _bounds(a_start, a_end)
    b_start_minutes, b_end_minutes = _bounds(b_start, b_end)
    return a_start_minutes < b_end_minutes and b_start_minutes < a_end_minutes


def slot_taken(slot_start: str, booked_start: str, booked_end: str) -> bool:
    """Availability listing rule: a slot is taken when a booking starts on it
    or strictly spans its start minute.

    Narrower than ``booking_conflicts``: a booking that begins part-way into
    the slot leaves the slot listed.
    """
    slot_minutes = to_minutes(slot_start)
    b_start, b_end = _bounds(booked_start, booked_end)
    return b_start == slot_minutes or b_start < slot_minutes < b_end
