import logging

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST
from sqlalchemy.exc import SQLAlchemyError

from medbook.core import config
from medbook.database import Base, SessionLocal, engine, ensure_appointment_schema
from medbook.models import appointment, doctor, user  # noqa: F401  registers tables on Base
from medbook.repositories.sql_booking_store import SqlBookingStore
from medbook.routes import appointment_routes, doctor_routes
from medbook.scheduling.metrics import NullMetricsRecorder, PrometheusMetricsRecorder
from medbook.scheduling.ports import BookingStoreError
from medbook.scheduling.scheduler import BookingLocks

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )


def create_app() -> FastAPI:
    config.validate_runtime_config()

    application = FastAPI(title='MedBook Scheduling API')
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    application.state.metrics = PrometheusMetricsRecorder() if config.METRICS_ENABLED else NullMetricsRecorder()
    application.state.booking_locks = BookingLocks()

    @application.on_event('startup')
    def initialize_database() -> None:
        try:
            Base.metadata.create_all(bind=engine)
            ensure_appointment_schema()
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')

    @application.on_event('startup')
    def initialize_metrics() -> None:
        db = SessionLocal()
        try:
            active = SqlBookingStore(db).count_scheduled_appointments()
            application.state.metrics.set_active_appointments(active)
            logger.info('Metrics initialized: %s active appointments', active)
        except BookingStoreError:
            logger.exception('Error initializing metrics')
        finally:
            db.close()

    @application.get('/')
    def root():
        return {'status': 'Medical Scheduling API Running'}

    @application.get('/metrics')
    def metrics():
        recorder = application.state.metrics
        if not isinstance(recorder, PrometheusMetricsRecorder):
            return Response(status_code=404)
        return Response(content=recorder.render(), media_type=CONTENT_TYPE_LATEST)

    application.include_router(appointment_routes.router, prefix='/api/appointments')
    application.include_router(doctor_routes.router, prefix='/api/doctors')
    return application


configure_logging()
app = create_app()
