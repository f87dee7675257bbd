from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from .config import settings


def make_engine(url: str) -> Engine:
    """
    Create an engine for the given URL.

    SQLite gets two tweaks:
    - foreign keys are switched on for every connection
    - every transaction starts with BEGIN IMMEDIATE, so the write lock is
      taken before the booking re-check reads anything. Two submissions for
      the same day are serialized instead of both reading a stale snapshot.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    # check_same_thread=False: FastAPI runs sync endpoints in a thread pool
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def enable_sqlite_fk(dbapi_connection, _):
        # Hand transaction control to SQLAlchemy (pysqlite emits its own BEGIN otherwise)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = make_engine(settings.resolved_database_url)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
