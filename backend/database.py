from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


def _build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


engine = _build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

# Largest primary key the INTEGER columns can hold.
MAX_ID = 2**63 - 1

_schema_lock = Lock()
_reservation_schema_checked = False


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_reservation_schema() -> None:
    """Create the reservation indexes on a database whose tables already exist.

    ``create_all`` skips indexes of tables that are already present, so a
    database created before the active-slot index still gets it here.
    """
    global _reservation_schema_checked

    if _reservation_schema_checked:
        return

    with _schema_lock:
        if _reservation_schema_checked:
            return

        inspector = inspect(engine)

        if 'reservations' not in inspector.get_table_names():
            _reservation_schema_checked = True
            return

        with engine.begin() as connection:
            connection.execute(
                text(
                    'CREATE UNIQUE INDEX IF NOT EXISTS uq_reservations_active_slot '
                    "ON reservations(coworking_space_id, date, time_slot) WHERE status = 'active'"
                )
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_reservations_user_date ON reservations(user_id, date)')
            )

        _reservation_schema_checked = True
