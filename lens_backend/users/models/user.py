"""
PATH: users/models/user.py

STAFF USER

- Login identity is the email address.
- username is optional, derived from the email local-part when missing.
- role drives capabilities (permissions/roles.py):
    admin, manager, sales, production, dispatch

Sale orders point at users for audit (created_by / updated_by)
and for dispatch assignment (assigned_person).
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def _free_username(self, email: str) -> str:
        stem = (email.split("@")[0] or "staff").strip().lower()
        taken = set(
            self.model.objects.filter(username__istartswith=stem).values_list("username", flat=True)
        )
        taken = {name.lower() for name in taken if name}

        if stem not in taken:
            return stem
        suffix = 2
        while f"{stem}{suffix}" in taken:
            suffix += 1
        return f"{stem}{suffix}"

    def create_user(self, email, password=None, **extra_fields):
        email = self.normalize_email((email or "").strip())
        if not email:
            raise ValueError("Staff users need an email address")

        extra_fields.setdefault("is_active", True)
        if not (extra_fields.get("username") or "").strip():
            extra_fields["username"] = self._free_username(email)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields["role"] = User.ROLE_ADMIN
        extra_fields["is_staff"] = True
        extra_fields["is_superuser"] = True
        return self.create_user(email, password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_ADMIN = "admin"
    ROLE_MANAGER = "manager"
    ROLE_SALES = "sales"
    ROLE_PRODUCTION = "production"
    ROLE_DISPATCH = "dispatch"

    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_MANAGER, "Manager"),
        (ROLE_SALES, "Sales"),
        (ROLE_PRODUCTION, "Production"),
        (ROLE_DISPATCH, "Dispatch"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, unique=True, null=True, blank=True)
    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_SALES)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    def clean(self):
        self.email = self.__class__.objects.normalize_email(self.email or "").strip()
        if not self.email:
            raise ValidationError({"email": "Email is required"})
        self.username = (self.username or "").strip() or None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email

    def __str__(self):
        return f"{self.email} ({self.role})"
