# masters/apps.py

from django.apps import AppConfig


class MastersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "masters"
    verbose_name = "Lens Master Data"
