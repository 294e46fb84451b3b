#!/usr/bin/env python
"""
Management entrypoint for the lens sale-order backend.

DJANGO_SETTINGS_MODULE defaults to backend.settings.dev; the bare
settings package ("backend.settings") configures nothing, so it is
redirected to dev as well.

    python manage.py migrate
    python manage.py seed_lens_masters
    python manage.py seed_staff
    python manage.py test
"""

import os
import sys


def main():
    if os.environ.get("DJANGO_SETTINGS_MODULE", "").strip() in ("", "backend.settings"):
        os.environ["DJANGO_SETTINGS_MODULE"] = "backend.settings.dev"

    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
