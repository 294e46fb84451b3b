"""
PATH: backend/settings/base.py

SHARED SETTINGS (dev + prod)

Everything environment-specific is read through django-environ;
dev.py / prod.py only tighten or relax what is set here.

Sections:
- env schema + .env loading
- apps / middleware / DRF / JWT
- SALE_ORDERS: order numbering + credit gate policy
- LOGGING: console logging for the domain apps
- Sentry (only when SENTRY_DSN is set)
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import environ
import sentry_sdk
from corsheaders.defaults import default_headers, default_methods
from sentry_sdk.integrations.django import DjangoIntegration

# lens_backend/
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# =========================================================
# ENVIRONMENT
# =========================================================
env = environ.Env(
    DEBUG=(bool, True),
    SECRET_KEY=(str, "dev-insecure-change-me"),
    TIME_ZONE=(str, "UTC"),
    ALLOWED_HOSTS=(list, ["localhost", "127.0.0.1"]),
    CORS_ALLOWED_ORIGINS=(list, ["http://localhost:5173"]),
    CSRF_TRUSTED_ORIGINS=(list, ["http://localhost:5173"]),
    DATABASE_URL=(str, f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
    THROTTLE_ANON_RATE=(str, "60/min"),
    THROTTLE_USER_RATE=(str, "600/min"),
    JWT_ACCESS_MINUTES=(int, 30),
    JWT_REFRESH_DAYS=(int, 1),
    ADMIN_PATH=(str, "admin/"),
    LOG_LEVEL=(str, "INFO"),
    SENTRY_DSN=(str, ""),
    SENTRY_ENVIRONMENT=(str, "development"),
    SENTRY_TRACES_SAMPLE_RATE=(float, 0.0),
    # sale orders
    ORDER_NO_PREFIX=(str, "SO"),
    ALLOW_EXCEED_CREDIT_LIMIT=(bool, True),
)

# repo-level .env wins over one next to manage.py
for _env_file in (BASE_DIR.parent / ".env", BASE_DIR / ".env"):
    if _env_file.exists():
        env.read_env(str(_env_file))
        break

SECRET_KEY = env("SECRET_KEY").strip()
DEBUG = env("DEBUG")
ALLOWED_HOSTS = env("ALLOWED_HOSTS")

LANGUAGE_CODE = "en-us"
TIME_ZONE = env("TIME_ZONE").strip() or "UTC"
USE_I18N = True
USE_TZ = True

AUTH_USER_MODEL = "users.User"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =========================================================
# APPLICATIONS
# =========================================================
DJANGO_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS = [
    "corsheaders",
    "rest_framework",
    "rest_framework_simplejwt",
    "drf_spectacular",
    "django_filters",
]

LOCAL_APPS = [
    "users.apps.UsersConfig",
    "masters.apps.MastersConfig",
    "sale_orders.apps.SaleOrdersConfig",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "backend.urls"
ADMIN_PATH = env("ADMIN_PATH").strip("/ ") + "/"
WSGI_APPLICATION = "backend.wsgi.application"

# admin only
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

DATABASES = {"default": env.db("DATABASE_URL")}

STATIC_URL = "static/"

# =========================================================
# API
# =========================================================
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "DEFAULT_FILTER_BACKENDS": ("django_filters.rest_framework.DjangoFilterBackend",),
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_THROTTLE_CLASSES": (
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ),
    "DEFAULT_THROTTLE_RATES": {
        "anon": env("THROTTLE_ANON_RATE"),
        "user": env("THROTTLE_USER_RATE"),
    },
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=env("JWT_ACCESS_MINUTES")),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=env("JWT_REFRESH_DAYS")),
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Lens Sale Order API",
    "DESCRIPTION": "Custom lens sale orders: prescription capture, pricing, lifecycle and dispatch",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}

CORS_ALLOWED_ORIGINS = env("CORS_ALLOWED_ORIGINS")
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_METHODS = list(default_methods)
CORS_ALLOW_HEADERS = list(default_headers)
CSRF_TRUSTED_ORIGINS = env("CSRF_TRUSTED_ORIGINS")

# =========================================================
# SALE ORDERS
# =========================================================
SALE_ORDERS = {
    # SO-<year>-001, SO-<year>-002, ...
    "ORDER_NO_PREFIX": env("ORDER_NO_PREFIX").strip() or "SO",
    # True: over-limit customers are flagged only. False: order entry is refused.
    "ALLOW_EXCEED_CREDIT_LIMIT": env("ALLOW_EXCEED_CREDIT_LIMIT"),
}

# =========================================================
# LOGGING
# =========================================================
LOG_LEVEL = env("LOG_LEVEL").strip().upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "sale_orders": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "masters": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# =========================================================
# SENTRY
# =========================================================
SENTRY_DSN = env("SENTRY_DSN").strip()

if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=env("SENTRY_ENVIRONMENT"),
        integrations=[DjangoIntegration()],
        traces_sample_rate=env("SENTRY_TRACES_SAMPLE_RATE"),
        send_default_pii=False,
    )
