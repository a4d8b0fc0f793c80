"""
Base settings for the POS / FDMS project.
Development defaults; production overrides live in settings_production.
"""

import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("SECRET_KEY", "dev-insecure-pos-secret-key")
DEBUG = os.environ.get("DEBUG", "true").lower() in ("1", "true", "yes")
ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "rest_framework_simplejwt",
    "channels",
    "fiscal",
    "offline",
    "pos",
    "expenses",
    "accounts",
    "dashboard",
    "reports",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "pos_project.jwt_middleware.JWTAuthenticationMiddleware",
    "pos_project.api_error_middleware.APIExceptionMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "pos_project.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "pos_project.wsgi.application"
ASGI_APPLICATION = "pos_project.asgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("TIME_ZONE", "Africa/Harare")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# REST framework / JWT
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
}
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=8),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# Channels
CHANNEL_LAYERS = {
    "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"},
}

# Celery
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = os.environ.get("CELERY_TASK_ALWAYS_EAGER", "false").lower() in ("1", "true", "yes")
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    "fiscal-reset-daily-counters": {
        "task": "fiscal.reset_daily_counters",
        "schedule": timedelta(days=1),
    },
    "fiscal-process-pending-transactions": {
        "task": "fiscal.process_pending_transactions",
        "schedule": timedelta(minutes=5),
    },
    "fiscal-reconcile-fiscalized-sales": {
        "task": "fiscal.reconcile_fiscalized_sales",
        "schedule": timedelta(minutes=15),
    },
    "offline-sync-offline-queue": {
        "task": "offline.sync_offline_queue",
        "schedule": timedelta(minutes=10),
    },
}

# FDMS (ZIMRA)
FDMS_TEST_BASE_URL = os.environ.get("FDMS_TEST_BASE_URL", "https://fdmsapitest.zimra.co.zw")
FDMS_PROD_BASE_URL = os.environ.get("FDMS_PROD_BASE_URL", "https://fdmsapi.zimra.co.zw")
FDMS_DEVICE_MODEL_NAME = os.environ.get("FDMS_DEVICE_MODEL_NAME", "POS-VFD")
FDMS_DEVICE_MODEL_VERSION = os.environ.get("FDMS_DEVICE_MODEL_VERSION", "1.0")
FDMS_REQUEST_TIMEOUT = int(os.environ.get("FDMS_REQUEST_TIMEOUT", "30"))
FDMS_DEBUG_ERRORS = DEBUG
FDMS_SYNC_BATCH_SIZE = 10
FDMS_RETRY_BATCH_SIZE = 5
FDMS_MAX_RETRIES = 3
FDMS_DEFAULT_CURRENCY = "USD"

POS_LOW_STOCK_THRESHOLD = 10

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
        "json": {
            "()": "fiscal.logging_formatter.JSONFormatter",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
        },
        "fiscal": {
            "handlers": ["console"],
            "level": os.environ.get("FISCAL_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "pos": {
            "handlers": ["console"],
            "level": os.environ.get("POS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
