# backend/puantaj/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/puantaj.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///puantaj.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Sessions live for 30 days; expired rows are swept every 30 minutes.
    # An interval of 0 disables the background sweeper (tests, CLI).
    SESSION_TTL_DAYS = int(os.environ.get("SESSION_TTL_DAYS", "30"))
    SESSION_SWEEP_INTERVAL_SECONDS = int(os.environ.get("SESSION_SWEEP_INTERVAL_SECONDS", "1800"))

    LOGIN_MAX_FAILED_ATTEMPTS = int(os.environ.get("LOGIN_MAX_FAILED_ATTEMPTS", "10"))
    LOGIN_LOCKOUT_MINUTES = int(os.environ.get("LOGIN_LOCKOUT_MINUTES", "15"))

    CORS_ALLOWED_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:5000",
        ).split(",")
        if origin.strip()
    )

    AUTH_COOKIE_NAME = "auth_token"
