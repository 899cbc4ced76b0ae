"""Application configuration loaded from environment.

Keep development-friendly defaults here, but always set secure/production
values via environment variables. The comments explain intent and
acceptable environment formats where helpful.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return str(os.getenv(name, default)).lower() in {"1", "true", "yes", "on"}


DEFAULT_SECRET_KEY = "dev-secret-key"


class Config:
    # Deployment environment: "development", "production" or "test".
    APP_ENV = os.getenv("APP_ENV", "development").lower()

    # Secret key used by Flask itself. MUST be set for production; a short
    # development fallback is provided to make local testing easier.
    SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)

    # MongoDB connection string. Default points to a local DB for development.
    # Override in production with a managed connection string.
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/sweet_shop")

    # JWT signing. Tokens are HS256 by default and live for a week. When no
    # dedicated JWT_SECRET is provided the Flask SECRET_KEY is reused.
    JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))

    # bcrypt cost factor used for new password hashes.
    BCRYPT_LOG_ROUNDS = int(os.getenv("BCRYPT_LOG_ROUNDS", "10"))

    # Rate limiter storage. "memory://" is per-process; point this at a
    # shared backend (e.g. "mongodb://...") when running several workers.
    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", "1")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "5000 per day;500 per hour")
    # Applied to register/login only.
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "20 per minute")

    # Create/refresh Mongo indexes when the app starts.
    ENSURE_INDEXES = _env_flag("ENSURE_INDEXES", "1")

    # Toggle showing exception text and tracebacks in 500 responses.
    SHOW_DETAILED_ERRORS = _env_flag("SHOW_DETAILED_ERRORS")

    # Logging. LOG_JSON switches the root handler to one JSON object per line.
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_JSON = _env_flag("LOG_JSON")

    # Per-request timing line (total / Mongo) in the app log.
    LOG_PERF_DETAILS = _env_flag("LOG_PERF_DETAILS", "1")

    GUNICORN_TIMEOUT = int(os.getenv("GUNICORN_TIMEOUT", "30"))
    GUNICORN_WORKERS = int(os.getenv("GUNICORN_WORKERS", "2"))


class TestingConfig(Config):
    APP_ENV = "test"
    TESTING = True
    SECRET_KEY = "test-secret-key"
    JWT_SECRET = "test-jwt-secret-key-with-enough-length"
    MONGO_URI = "mongodb://localhost:27017/sweet_shop_test"
    # Lowest cost bcrypt accepts; keeps the suite fast.
    BCRYPT_LOG_ROUNDS = 4
    RATELIMIT_ENABLED = False
    ENSURE_INDEXES = False
    LOG_PERF_DETAILS = False
