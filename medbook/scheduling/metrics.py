from typing import Optional, Protocol

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest


class MetricsRecorder(Protocol):
    def appointment_created(self, created_by: str) -> None:
        ...

    def booking_rejected(self, reason: str) -> None:
        ...

    def status_changed(self, status: str) -> None:
        ...

    def set_active_appointments(self, count: int) -> None:
        ...


class NullMetricsRecorder:
    def appointment_created(self, created_by: str) -> None:
        pass

    def booking_rejected(self, reason: str) -> None:
        pass

    def status_changed(self, status: str) -> None:
        pass

    def set_active_appointments(self, count: int) -> None:
        pass


class PrometheusMetricsRecorder:
    """Records scheduling metrics on its own registry.

    Each instance owns a ``CollectorRegistry`` so tests and separate app
    instances never share counters.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, prefix: str = 'medbook') -> None:
        self.registry = registry or CollectorRegistry()
        self._created = Counter(
            f'{prefix}_appointments_created_total',
            'Appointments accepted by the scheduler',
            ['created_by'],
            registry=self.registry,
        )
        self._rejected = Counter(
            f'{prefix}_booking_rejections_total',
            'Booking attempts rejected by the scheduler',
            ['reason'],
            registry=self.registry,
        )
        self._status_changes = Counter(
            f'{prefix}_appointment_status_changes_total',
            'Appointment status changes',
            ['status'],
            registry=self.registry,
        )
        self._active = Gauge(
            f'{prefix}_active_appointments',
            'Number of active (scheduled) appointments',
            registry=self.registry,
        )

    def appointment_created(self, created_by: str) -> None:
        self._created.labels(created_by=created_by).inc()

    def booking_rejected(self, reason: str) -> None:
        self._rejected.labels(reason=reason).inc()

    def status_changed(self, status: str) -> None:
        self._status_changes.labels(status=status).inc()

    def set_active_appointments(self, count: int) -> None:
        self._active.set(count)

    def render(self) -> bytes:
        return generate_latest(self.registry)
