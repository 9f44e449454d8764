"""
Service configuration.
Read from environment variables (a local .env is loaded first).
"""

import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _get_int(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _database_uri():
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    db_user = os.environ.get("DB_USER", "participation_svc_user")
    db_pass = os.environ.get("DB_PASS", "password")
    db_host = os.environ.get("DB_HOST", "participations-db")
    db_name = os.environ.get("DB_NAME", "participations_db")
    return f"postgresql://{db_user}:{db_pass}@{db_host}:5432/{db_name}"


class Config:
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}
    DB_POOL_TIMEOUT = _get_int("DB_POOL_TIMEOUT", 5)
    DB_CONNECT_TIMEOUT = _get_int("DB_CONNECT_TIMEOUT", 5)

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", os.environ.get("JWT_SECRET", "dev-secret-change-me"))
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=_get_int("JWT_ACCESS_TOKEN_MINUTES", 15))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE")

    DEFAULT_PAGE_SIZE = _get_int("DEFAULT_PAGE_SIZE", 10)
    MAX_PAGE_SIZE = _get_int("MAX_PAGE_SIZE", 100)

    INITIAL_SPONSOR_BONUS_PCT = os.environ.get("INITIAL_SPONSOR_BONUS_PCT", "10")
    INITIAL_TDS_PCT = os.environ.get("INITIAL_TDS_PCT", "5")
