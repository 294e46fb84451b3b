"""
PATH: backend/settings/prod.py

PRODUCTION

Fail closed on anything a deploy can get wrong:
- DEBUG forced off, SECRET_KEY / ALLOWED_HOSTS mandatory
- Postgres only: status changes rely on row locks and conditional UPDATEs
- https-only CORS / CSRF origins
- static files served by WhiteNoise
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, LOGGING, MIDDLEWARE, env

DEBUG = False


def _require(name: str, value):
    if not value:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    return value


# =========================================================
# CORE
# =========================================================
SECRET_KEY = _require("SECRET_KEY", env("SECRET_KEY", default="").strip())
if SECRET_KEY == "dev-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY is still the development placeholder.")

ALLOWED_HOSTS = _require("ALLOWED_HOSTS", env.list("ALLOWED_HOSTS", default=[]))

_database_url = _require("DATABASE_URL", env("DATABASE_URL", default="").strip())
if not _database_url.startswith(("postgres://", "postgresql://")):
    raise ImproperlyConfigured("DATABASE_URL must point at Postgres in production.")

DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("DB_CONN_MAX_AGE", default=60)

# =========================================================
# STATIC (WhiteNoise)
# =========================================================
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))
_security = MIDDLEWARE.index("django.middleware.security.SecurityMiddleware")
MIDDLEWARE.insert(_security + 1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# =========================================================
# TRANSPORT + COOKIES
# =========================================================
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True

# =========================================================
# CORS / CSRF
# =========================================================
CORS_ALLOWED_ORIGINS = _require("CORS_ALLOWED_ORIGINS", env.list("CORS_ALLOWED_ORIGINS", default=[]))
CSRF_TRUSTED_ORIGINS = _require("CSRF_TRUSTED_ORIGINS", env.list("CSRF_TRUSTED_ORIGINS", default=[]))

for _name, _origins in (
    ("CORS_ALLOWED_ORIGINS", CORS_ALLOWED_ORIGINS),
    ("CSRF_TRUSTED_ORIGINS", CSRF_TRUSTED_ORIGINS),
):
    if any(not origin.startswith("https://") for origin in _origins):
        raise ImproperlyConfigured(f"{_name} must only list https:// origins in production.")

# JWT in the Authorization header; no cookies cross origins
CORS_ALLOW_CREDENTIALS = False

# =========================================================
# LOGGING
# =========================================================
for _logger in ("sale_orders", "masters"):
    LOGGING["loggers"][_logger]["level"] = env("LOG_LEVEL", default="WARNING").upper()
