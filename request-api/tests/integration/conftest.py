import os

import alembic
import pytest
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy_utils import database_exists, create_database, drop_database

from config import get_settings
from database import Database
from main import app, get_db


@pytest.fixture(scope="module")
def postgres(request):
    try:
        from testcontainers.core.waiting_utils import wait_container_is_ready
        from testcontainers.postgres import PostgresContainer

        postgres_container = PostgresContainer("postgres:16.2-alpine")
        postgres_container.start()
    except Exception as error:
        pytest.skip(f"PostgreSQL container unavailable: {error}")

    def remove_postgres_container():
        postgres_container.stop()

    request.addfinalizer(remove_postgres_container)
    wait_container_is_ready(postgres_container)
    return postgres_container.get_connection_url()


@pytest.fixture(scope="module")
def test_dir(request):
    return os.path.dirname(request.module.__file__)


@pytest.fixture(scope="module")
def pg_database(postgres, test_dir):
    if not database_exists(postgres):
        print("Database does not exist, creating...")
        create_database(postgres)
    # Apply migrations in postgres DB
    config = Config(os.path.realpath(f"{test_dir}/../../alembic.ini"))
    config.set_main_option(
        "script_location", os.path.realpath(f"{test_dir}/../../migrations")
    )
    config.set_main_option("sqlalchemy.url", postgres)
    previous_url = os.environ.pop("DATABASE_URL", None)
    try:
        alembic.command.upgrade(config, "head")
    finally:
        if previous_url is not None:
            os.environ["DATABASE_URL"] = previous_url

    database = Database.from_url(postgres)
    yield database

    database.dispose()
    drop_database(postgres)


@pytest.fixture
def pg_client(pg_database, settings):
    def override_get_db():
        db = pg_database.session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
    with pg_database.engine.begin() as connection:
        connection.exec_driver_sql("TRUNCATE requests RESTART IDENTITY")
