import os
from functools import cache
from typing import FrozenSet

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_ONE_TIME_PROGRAMS = (
    "Yoga and Meditation",
    "Mental Health Support",
    "Awareness Programs",
    "Health Checkup Camps",
    "Gym Membership",
)

DEFAULT_ALLOWED_ORIGINS = (
    "http://13.60.223.220:3094",
    "http://localhost:5500",
    "http://127.0.0.1:5500",
    "http://13.60.223.220:5500",
    "http://127.0.0.1:5501",
    "http://127.0.0.1:5503",
    "http://13.60.223.220:8157",
    "http://13.60.223.220:8158",
)

STATUS_VALUES = ("Pending", "Approved", "Rejected")

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_UPLOAD_TYPES = ("pdf", "jpg", "jpeg", "png")

UPLOADS_MAX_AGE_SECONDS = 7 * 24 * 60 * 60
STATIC_MAX_AGE_SECONDS = 24 * 60 * 60


def _csv(value: str):
    return frozenset(item.strip() for item in value.split(",") if item.strip())


class Settings(BaseModel):
    database_url: str
    frontend_url: str = "http://localhost:3094"
    allowed_origins: FrozenSet[str] = frozenset(DEFAULT_ALLOWED_ORIGINS)
    one_time_programs: FrozenSet[str] = frozenset(DEFAULT_ONE_TIME_PROGRAMS)
    upload_dir: str = "Uploads"
    static_dir: str = "public"
    frontend_dir: str = "Frontend"
    hr_page_dir: str = "HR_page"
    port: int = 3094
    environment: str = "production"
    db_connect_attempts: int = 5
    db_connect_delay_seconds: float = 5.0

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def origin_allow_list(self) -> FrozenSet[str]:
        return self.allowed_origins | {self.frontend_url}

    @classmethod
    def from_environ(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        database_url = env.get("DATABASE_URL") or (
            "postgresql://{user}:{password}@{host}:{port}/{name}".format(
                user=env.get("DB_USER", "postgres"),
                password=env.get("DB_PASSWORD", "admin123"),
                host=env.get("DB_HOST", "localhost"),
                port=env.get("DB_PORT", "5432"),
                name=env.get("DB_NAME", "new_employee_db"),
            )
        )
        values = {
            "database_url": database_url,
            "frontend_url": env.get("FRONTEND_URL", "http://localhost:3094"),
            "upload_dir": env.get("UPLOAD_DIR", "Uploads"),
            "static_dir": env.get("STATIC_DIR", "public"),
            "frontend_dir": env.get("FRONTEND_DIR", "Frontend"),
            "hr_page_dir": env.get("HR_PAGE_DIR", "HR_page"),
            "port": int(env.get("PORT", "3094")),
            "environment": env.get("ENVIRONMENT", "production"),
            "db_connect_attempts": int(env.get("DB_CONNECT_ATTEMPTS", "5")),
            "db_connect_delay_seconds": float(env.get("DB_CONNECT_DELAY_SECONDS", "5")),
        }
        if env.get("ALLOWED_ORIGINS"):
            values["allowed_origins"] = _csv(env["ALLOWED_ORIGINS"])
        if env.get("ONE_TIME_PROGRAMS"):
            values["one_time_programs"] = _csv(env["ONE_TIME_PROGRAMS"])
        return cls(**values)


@cache
def get_settings() -> Settings:
    load_dotenv()
    return Settings.from_environ()
