"""Clock-time helpers.

Clock times travel as zero-padded ``HH:MM`` strings. Every comparison in the
scheduling core goes through minutes-since-midnight so that ``"9:00"`` and
``"10:00"`` order correctly.
"""

import re

CLOCK_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')
MINUTES_PER_DAY = 24 * 60


def is_clock_time(value: str) -> bool:
    return bool(CLOCK_PATTERN.match(value or ''))


def to_minutes(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight.

    Single-digit hours (``9:00``) are accepted here since stored data may
    predate format validation.
    """
    try:
        hour_text, minute_text = value.split(':')
        hour, minute = int(hour_text), int(minute_text)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f'Invalid clock time: {value!r}') from exc

    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f'Invalid clock time: {value!r}')

    return hour * 60 + minute


def from_minutes(minutes: int) -> str:
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f'Minutes out of range for a single day: {minutes}')
    hour, minute = divmod(minutes, 60)
    return f'{hour:02d}:{minute:02d}'
