import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from payfam.core.config import settings
from payfam.core.exceptions import StorageUnavailable

logger = logging.getLogger(__name__)

Base = declarative_base()


def make_engine(database_url: str, **kwargs):
    """Create an engine for the given URL.

    pysqlite defers BEGIN and breaks SAVEPOINT handling, so SQLite connections
    get the documented SQLAlchemy recipe that emits BEGIN explicitly. The due
    resolver relies on nested transactions on every backend.
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs.setdefault("poolclass", StaticPool)
        engine = create_engine(database_url, **kwargs)

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            dbapi_connection.execute("PRAGMA foreign_keys=ON")

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

        return engine

    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **kwargs)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Yield a database session for one request."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def atomic(db: Session, action: str = "writing to the database"):
    """Commit everything done inside the block as one transaction.

    Any exception rolls the whole unit back. Connection-level failures are
    re-raised as StorageUnavailable so callers can retry.
    """
    try:
        yield db
        db.commit()
    except (OperationalError, InterfaceError) as e:
        db.rollback()
        logger.error("Storage failure while %s: %s", action, e)
        raise StorageUnavailable(f"Storage unavailable while {action}") from e
    except Exception:
        db.rollback()
        raise
