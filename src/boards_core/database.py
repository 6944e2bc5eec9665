# boards_core/database.py
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from dotenv import load_dotenv
from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

# Load environment variables from .env file
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./boards.db"


def get_database_url() -> str:
    """Resolve the database URL from the environment.

    ``DATABASE_URL`` wins when set. Otherwise a PostgreSQL URL is assembled
    from the ``DB_*`` variables, and without those a local SQLite file is used.
    """
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        return database_url

    db_host = os.getenv("DB_HOST")
    if not db_host:
        return DEFAULT_DATABASE_URL

    db_user = os.getenv("DB_USER")
    db_password = os.getenv("DB_PASSWORD")
    db_port = os.getenv("DB_PORT", "5432")
    db_name = os.getenv("DB_NAME")
    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def _echo_enabled() -> bool:
    return os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    database_url = database_url or get_database_url()
    echo = _echo_enabled() if echo is None else echo

    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_transactions(engine)
        return engine

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,  # Enable connection pool pre-ping
        pool_size=5,
        max_overflow=10,
    )


def _enable_sqlite_transactions(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first DML statement, so reads made
    # inside a batch would not be covered by the transaction. Emit it ourselves.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_and_tables(engine: Engine) -> None:
    # Import models so that every table is registered on the metadata
    from boards_core import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction(engine: Engine) -> Iterator[Session]:
    """Run a unit of work in one database transaction.

    Commits when the block exits normally; rolls back and re-raises on any
    exception, so either every row written in the block is durable or none is.
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def verify_database_connection(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {str(e)}")
        return False


def init_db(engine: Engine) -> None:
    create_db_and_tables(engine)
    if verify_database_connection(engine):
        logger.info("Database initialized successfully")
    else:
        logger.error("Database initialization failed")


@contextmanager
def use_session(engine: Engine, session: Optional[Session] = None) -> Iterator[Session]:
    """Yield ``session`` when the caller is already inside a unit of work,
    otherwise a short-lived session bound to ``engine``."""
    if session is not None:
        yield session
        return
    with get_session(engine) as own_session:
        yield own_session
