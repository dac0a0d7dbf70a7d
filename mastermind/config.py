"""
Single place to read settings from the environment.
A local .env is loaded first (dev convenience; in prod the platform injects env vars).

APP_ENV                   local | test | prod. "local" creates tables at startup.
DATABASE_URL              SQLAlchemy URL. Defaults to a SQLite file next to the app.
MASTERMIND_SECRET_SOURCE  local | random_org
MASTERMIND_DEBUG_SECRET   1/true/yes to log each new secret at DEBUG (never in prod)
LOG_LEVEL                 stdlib logging level name
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


APP_ENV = os.getenv("APP_ENV", "local")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./mastermind.db")
SECRET_SOURCE = os.getenv("MASTERMIND_SECRET_SOURCE", "local")
DEBUG_SECRET = _flag("MASTERMIND_DEBUG_SECRET") and APP_ENV != "prod"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
