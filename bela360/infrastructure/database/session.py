import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()

# Execution option asking SQLite to take the write lock when the transaction starts.
SQLITE_BEGIN_IMMEDIATE = "sqlite_begin_immediate"


def build_engine(database_url: str, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # One shared connection, otherwise every checkout sees an empty database.
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    elif database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False}, echo=echo)
    else:
        return create_engine(database_url, pool_pre_ping=True, pool_recycle=300, echo=echo)

    _use_explicit_sqlite_transactions(engine)
    return engine


def _use_explicit_sqlite_transactions(engine: Engine) -> None:
    """
    pysqlite defers BEGIN until the first write, so a read-check-insert sequence
    holds no lock during the read. Emit BEGIN ourselves, IMMEDIATE when asked.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(SQLITE_BEGIN_IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    # Import registers the tables on Base.metadata.
    from bela360.infrastructure.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready", extra={"database": engine.url.render_as_string(hide_password=True)})
