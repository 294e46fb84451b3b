# users/management/commands/seed_staff.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import (
    ROLE_ADMIN,
    ROLE_DISPATCH,
    ROLE_MANAGER,
    ROLE_PRODUCTION,
    ROLE_SALES,
)


@dataclass(frozen=True)
class StaffSpec:
    role: str
    email: str
    first_name: str
    last_name: str


STAFF = [
    StaffSpec(ROLE_ADMIN, "admin@example.com", "System", "Admin"),
    StaffSpec(ROLE_MANAGER, "manager@example.com", "Shop", "Manager"),
    StaffSpec(ROLE_SALES, "sales@example.com", "Order", "Desk"),
    StaffSpec(ROLE_PRODUCTION, "lab@example.com", "Lens", "Lab"),
    StaffSpec(ROLE_DISPATCH, "dispatch@example.com", "Delivery", "Rider"),
]


class Command(BaseCommand):
    help = "Seed one staff account per role (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for newly created accounts (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset the password of existing seeded accounts too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()
        created_count = updated_count = 0

        for spec in STAFF:
            is_admin = spec.role == ROLE_ADMIN
            wanted = {
                "role": spec.role,
                "first_name": spec.first_name,
                "last_name": spec.last_name,
                "is_staff": True,
                "is_superuser": is_admin,
                "is_active": True,
            }

            user = User.objects.filter(email=spec.email).first()
            if user is None:
                User.objects.create_user(email=spec.email, password=password, **wanted)
                created_count += 1
                continue

            changed = [key for key, value in wanted.items() if getattr(user, key) != value]
            for key in changed:
                setattr(user, key, wanted[key])
            if force_password:
                user.set_password(password)

            if changed or force_password:
                user.save()
                updated_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Staff seeded: {created_count} created, {updated_count} updated"
            )
        )
