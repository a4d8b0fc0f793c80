"""
Production environment settings.
Use: DJANGO_SETTINGS_MODULE=pos_project.settings_production

- DATABASE_URL (PostgreSQL) via dj_database_url, SQLite fallback
- FDMS production base URL required
- Rotating log files for FDMS and retail loggers
- DEBUG=False, SECRET_KEY from env
"""

import os
from pathlib import Path

import dj_database_url

from .settings import *  # noqa: F401, F403

BASE_DIR = Path(__file__).resolve().parent.parent

DEBUG = False
FDMS_DEBUG_ERRORS = False
SECRET_KEY = os.environ.get("SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable must be set in production")
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "").split(",")
if not ALLOWED_HOSTS or ALLOWED_HOSTS == [""]:
    raise ValueError("ALLOWED_HOSTS environment variable must be set in production")

if os.environ.get("DATABASE_URL"):
    DATABASES = {"default": dj_database_url.config(conn_max_age=600)}
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.environ.get("DB_PATH", str(BASE_DIR / "db_production.sqlite3")),
        }
    }

FDMS_PROD_BASE_URL = os.environ.get("FDMS_PROD_BASE_URL")
if not FDMS_PROD_BASE_URL:
    raise ValueError("FDMS_PROD_BASE_URL environment variable must be set in production")

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

LOGS_DIR = Path(os.environ.get("LOGS_DIR", str(BASE_DIR / "logs")))
LOGS_DIR.mkdir(parents=True, exist_ok=True)

LOGGING["handlers"]["fdms_file"] = {
    "level": "INFO",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": LOGS_DIR / "fdms.log",
    "maxBytes": 10 * 1024 * 1024,  # 10 MB
    "backupCount": 30,
    "formatter": "simple",
}
LOGGING["handlers"]["fdms_json_file"] = {
    "level": "INFO",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": LOGS_DIR / "fdms_json.log",
    "maxBytes": 10 * 1024 * 1024,
    "backupCount": 30,
    "formatter": "json",
}
LOGGING["handlers"]["error_file"] = {
    "level": "ERROR",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": LOGS_DIR / "error.log",
    "maxBytes": 5 * 1024 * 1024,
    "backupCount": 90,  # 90 days for errors
    "formatter": "simple",
}
LOGGING["handlers"]["pos_file"] = {
    "level": "INFO",
    "class": "logging.handlers.RotatingFileHandler",
    "filename": LOGS_DIR / "pos.log",
    "maxBytes": 10 * 1024 * 1024,
    "backupCount": 30,
    "formatter": "json",
}
LOGGING["loggers"]["fiscal"]["handlers"] = ["console", "fdms_file", "fdms_json_file", "error_file"]
LOGGING["loggers"]["pos"]["handlers"] = ["console", "pos_file", "error_file"]
