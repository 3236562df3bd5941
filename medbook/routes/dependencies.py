from fastapi import Depends, Request
from sqlalchemy.orm import Session

from medbook.core import config
from medbook.database import get_db
from medbook.repositories.sql_booking_store import SqlBookingStore
from medbook.scheduling.availability import AvailabilityGenerator
from medbook.scheduling.metrics import MetricsRecorder, NullMetricsRecorder
from medbook.scheduling.scheduler import AppointmentScheduler, BookingLocks

_fallback_locks = BookingLocks()


def get_metrics(request: Request) -> MetricsRecorder:
    return getattr(request.app.state, 'metrics', None) or NullMetricsRecorder()


def get_booking_locks(request: Request) -> BookingLocks:
    # Locks must outlive a single request to serialise concurrent bookings.
    return getattr(request.app.state, 'booking_locks', None) or _fallback_locks


def get_store(db: Session = Depends(get_db)) -> SqlBookingStore:
    return SqlBookingStore(db)


def get_scheduler(
    store: SqlBookingStore = Depends(get_store),
    metrics: MetricsRecorder = Depends(get_metrics),
    locks: BookingLocks = Depends(get_booking_locks),
) -> AppointmentScheduler:
    return AppointmentScheduler(store, metrics=metrics, locks=locks)


def get_availability_generator(store: SqlBookingStore = Depends(get_store)) -> AvailabilityGenerator:
    return AvailabilityGenerator(store, slot_minutes=config.SLOT_DURATION_MINUTES)
