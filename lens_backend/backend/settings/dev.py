"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT
SQLite by default, DEBUG on, domain loggers at DEBUG unless LOG_LEVEL says otherwise.
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1", "testserver"])

LOGGING["loggers"]["sale_orders"]["level"] = env("LOG_LEVEL", default="DEBUG").upper()
