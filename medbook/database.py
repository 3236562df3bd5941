from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from medbook.core import config


def build_engine(database_url: str):
    engine_options = {'pool_pre_ping': True}
    if not database_url.startswith('sqlite'):
        engine_options['pool_timeout'] = config.DB_POOL_TIMEOUT_SECONDS
    return create_engine(database_url, **engine_options)


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False

SCHEDULED_START_INDEX = 'uq_appointments_scheduled_start'

APPOINTMENT_INDEX_STATEMENTS = [
    'CREATE INDEX IF NOT EXISTS idx_appointments_doctor_date_status '
    'ON appointments(doctor_id, date, status)',
    'CREATE INDEX IF NOT EXISTS idx_appointments_patient_date '
    'ON appointments(patient_id, date, start_time)',
    # One scheduled booking per doctor, day and start time.
    f"CREATE UNIQUE INDEX IF NOT EXISTS {SCHEDULED_START_INDEX} "
    "ON appointments(doctor_id, date, start_time) WHERE status = 'scheduled'",
]


def ensure_appointment_schema(bind=None) -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked and bind is None:
        return

    with _schema_lock:
        if _appointment_schema_checked and bind is None:
            return

        target = bind if bind is not None else engine
        inspector = inspect(target)

        if 'appointments' not in inspector.get_table_names():
            if bind is None:
                _appointment_schema_checked = True
            return

        with target.begin() as connection:
            for statement in APPOINTMENT_INDEX_STATEMENTS:
                connection.execute(text(statement))

        if bind is None:
            _appointment_schema_checked = True


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
