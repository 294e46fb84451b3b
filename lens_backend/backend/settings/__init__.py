"""
Settings package.

Select with DJANGO_SETTINGS_MODULE:
- backend.settings.dev   (local, SQLite)
- backend.settings.prod  (Postgres only)
"""
