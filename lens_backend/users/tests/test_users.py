from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from permissions.roles import (
    ALL_CAPABILITIES,
    CAP_ORDERS_DISPATCH,
    CAP_ORDERS_PRODUCE,
    CAP_PRICING_VIEW,
    effective_capabilities_for,
)

User = get_user_model()


class StaffUserTests(TestCase):
    def test_username_derived_from_email(self):
        user = User.objects.create_user(email="Lab.Tech@Example.com", password="pass", role="production")

        self.assertEqual(user.username, "lab.tech")
        self.assertTrue(user.check_password("pass"))

    def test_role_capabilities(self):
        production = User.objects.create_user(email="lab@example.com", password="pass", role="production")
        dispatch = User.objects.create_user(email="rider@example.com", password="pass", role="dispatch")

        self.assertIn(CAP_ORDERS_PRODUCE, effective_capabilities_for(None, production))
        self.assertNotIn(CAP_PRICING_VIEW, effective_capabilities_for(None, production))
        self.assertIn(CAP_ORDERS_DISPATCH, effective_capabilities_for(None, dispatch))

    def test_superuser_has_everything(self):
        admin = User.objects.create_superuser(email="root@example.com", password="pass")
        self.assertEqual(effective_capabilities_for(None, admin), set(ALL_CAPABILITIES))


class MeViewTests(TestCase):
    def test_me_lists_capabilities(self):
        user = User.objects.create_user(email="sales@example.com", password="pass", role="sales")
        client = APIClient()
        client.force_authenticate(user=user)

        response = client.get("/api/auth/me/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["role"], "sales")
        self.assertIn(CAP_PRICING_VIEW, response.data["capabilities"])

    def test_me_requires_authentication(self):
        response = APIClient().get("/api/auth/me/")
        self.assertEqual(response.status_code, 401)


class SeedStaffCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_staff", stdout=StringIO())
        call_command("seed_staff", stdout=StringIO())

        self.assertEqual(User.objects.count(), 5)
        self.assertEqual(
            set(User.objects.values_list("role", flat=True)),
            {"admin", "manager", "sales", "production", "dispatch"},
        )
        self.assertTrue(User.objects.get(email="admin@example.com").is_superuser)

    def test_seed_restores_role(self):
        call_command("seed_staff", stdout=StringIO())
        User.objects.filter(email="lab@example.com").update(role="sales")

        call_command("seed_staff", stdout=StringIO())

        self.assertEqual(User.objects.get(email="lab@example.com").role, "production")
