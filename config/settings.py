"""
Innkeep – Django Settings (Infrastructure Only)
================================================
Django serves as the framework container for the Innkeep rate core.
The engines never import Django; they receive PricingSettings built
from INNKEEP_PRICING by the adapter wiring.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "INNKEEP_SECRET_KEY", "innkeep-dev-key-replace-before-deployment"
)

DEBUG = os.environ.get("INNKEEP_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
# Django infrastructure only. The rate core keeps its state in memory.
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL ───────────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
APPEND_SLASH = False

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Pricing ───────────────────────────────────────────────────
# Read once by adapters.django_api.wiring.load_pricing_settings().
INNKEEP_PRICING = {
    "BASE_CURRENCY": "USD",
    "DEFAULT_TAX_PERCENT": "10",
    "DEFAULT_MEAL_PLAN_CODE": "RO",
    "AUDIT_LOG_LIMIT": 500,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "innkeep": {
            "handlers": ["console"],
            "level": os.environ.get("INNKEEP_LOG_LEVEL", "INFO"),
        },
    },
}
