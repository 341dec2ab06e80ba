"""
Handover – Django Settings (Infrastructure Only)
=================================================
Django hosts the order store tables and settings. Engine behaviour
lives in the engines; only tunables are read from here.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "HANDOVER_SECRET_KEY", "handover-dev-key-replace-before-deployment",
)

DEBUG = os.environ.get("HANDOVER_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── Handover modules ──────────────────────────────────
    "core.order_store",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("HANDOVER_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "handover": {
            "handlers": ["console"],
            "level": os.environ.get("HANDOVER_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}

# ── Engine Tunables ───────────────────────────────────────────
# Read through core.config.settings.load_engine_settings().
HANDOVER = {
    "NOTIFICATION_MAX_RETRIES": int(
        os.environ.get("HANDOVER_NOTIFICATION_MAX_RETRIES", "3")
    ),
    "NOTIFICATION_BACKOFF_BASE_SECONDS": float(
        os.environ.get("HANDOVER_NOTIFICATION_BACKOFF_BASE_SECONDS", "0.5")
    ),
    "NOTIFICATION_BACKOFF_MAX_SECONDS": float(
        os.environ.get("HANDOVER_NOTIFICATION_BACKOFF_MAX_SECONDS", "8.0")
    ),
    "ADVISORY_TIMEOUT_SECONDS": float(
        os.environ.get("HANDOVER_ADVISORY_TIMEOUT_SECONDS", "10.0")
    ),
    "ADVISORY_MAX_WORKERS": int(
        os.environ.get("HANDOVER_ADVISORY_MAX_WORKERS", "4")
    ),
    "MEDIATOR_ACTOR_ID": os.environ.get("HANDOVER_MEDIATOR_ACTOR_ID", "mediator"),
    "MEDIATOR_DISPLAY_NAME": os.environ.get(
        "HANDOVER_MEDIATOR_DISPLAY_NAME", "AI Mediator",
    ),
}
