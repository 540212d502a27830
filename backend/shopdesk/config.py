# backend/shopdesk/config.py
from __future__ import annotations
import os


def _csv(value: str) -> set[str]:
    return {part.strip() for part in value.split(",") if part.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/shopdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///shopdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer sessions expire after this many minutes
    SESSION_TTL_MINUTES = int(os.environ.get("SESSION_TTL_MINUTES", "60"))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "5"))

    # Credential pair that may log in before the account is approved
    SPECIAL_EMPLOYEE_USERNAME = os.environ.get("SPECIAL_EMPLOYEE_USERNAME")
    SPECIAL_EMPLOYEE_PASSWORD = os.environ.get("SPECIAL_EMPLOYEE_PASSWORD")

    CORS_ALLOWED_ORIGINS = _csv(os.environ.get(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    ))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    BCRYPT_ROUNDS = 4
    SPECIAL_EMPLOYEE_USERNAME = "special@shop.local"
    SPECIAL_EMPLOYEE_PASSWORD = "Special123!"
