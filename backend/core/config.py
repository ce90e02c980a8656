import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./coworking.db")

API_PREFIX = "/api/v1"
CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), ["http://localhost:3000"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

AUTH_COOKIE_NAME = "token"
AUTH_COOKIE_SECURE = _get_bool(os.getenv("AUTH_COOKIE_SECURE"), default=APP_ENV.lower() == "production")

BOOKING_MAX_ATTEMPTS = int(os.getenv("BOOKING_MAX_ATTEMPTS", "3"))

API_URL = os.getenv("API_URL", "http://localhost:8000/api/v1")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if BOOKING_MAX_ATTEMPTS < 1:
        raise RuntimeError("BOOKING_MAX_ATTEMPTS must be at least 1.")
