import logging
import time

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from exceptions import StartupException
from request_model import models

logger = logging.getLogger(__name__)

POOL_OPTIONS = {
    "pool_size": 20,
    "max_overflow": 0,
    "pool_timeout": 5,
    "pool_recycle": 30,
    "pool_pre_ping": True,
}


class Database:
    """Storage handle owning the engine and its session factory.

    Created once at startup and disposed at shutdown; handlers receive
    sessions through the ``get_db`` dependency.
    """

    def __init__(self, engine):
        self.engine = engine
        self.session_maker = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def from_url(cls, database_url: str) -> "Database":
        options = {} if make_url(database_url).get_backend_name() == "sqlite" else POOL_OPTIONS
        return cls(create_engine(database_url, **options))

    def session(self):
        return self.session_maker()

    def ping(self) -> bool:
        with self.engine.connect() as connection:
            return len(connection.execute(text("SELECT 1")).all()) == 1

    def create_schema(self):
        models.Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


def wait_for_database(database: Database, attempts: int = 5, delay: float = 5, sleep=time.sleep):
    for attempt in range(1, attempts + 1):
        try:
            database.ping()
            logger.info("Successfully connected to the database")
            return
        except SQLAlchemyError as e:
            logger.error(f"Database connection attempt {attempt} failed: {e}")
            if attempt < attempts:
                sleep(delay)
    raise StartupException(f"Database unreachable after {attempts} attempts")


def init_database(database: Database, attempts: int = 5, delay: float = 5, sleep=time.sleep):
    wait_for_database(database, attempts=attempts, delay=delay, sleep=sleep)
    try:
        database.create_schema()
    except SQLAlchemyError as e:
        raise StartupException("Database initialization failed", details=str(e)) from e
    logger.info("Database initialized")
