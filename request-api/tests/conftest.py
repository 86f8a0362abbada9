import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FRONTEND_URL"] = "http://hr-portal.test"
os.environ["ALLOWED_ORIGINS"] = "http://localhost:5500,http://127.0.0.1:5500"
os.environ["ENVIRONMENT"] = "production"
os.environ.pop("ONE_TIME_PROGRAMS", None)

from config import Settings, get_settings  # noqa: E402
from main import app, get_db  # noqa: E402
from request_model import models  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    yield engine
    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "Uploads"


@pytest.fixture
def settings(tmp_path, upload_dir):
    return Settings(
        database_url="sqlite://",
        frontend_url="http://hr-portal.test",
        upload_dir=str(upload_dir),
        static_dir=str(tmp_path / "public"),
        frontend_dir=str(tmp_path / "Frontend"),
        hr_page_dir=str(tmp_path / "HR_page"),
    )


@pytest.fixture
def client(db_engine, settings):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


class Helpers:
    @staticmethod
    def request_form(**overrides):
        form = {
            "name": "Asha Verma",
            "email": "asha.verma@example.com",
            "empId": "EMP001",
            "program": "Personal Loan",
            "program_time": "",
            "date": "2025-03-10",
            "reason": "Home renovation",
            "loan_type": "Personal",
            "amount": "25000",
        }
        form.update(overrides)
        return {key: value for key, value in form.items() if value is not None}


@pytest.fixture
def helpers():
    return Helpers
