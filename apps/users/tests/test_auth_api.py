"""API tests for authentication endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User


class AuthAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="advertiser@example.com",
            phone="+225 07-00-00-00-01",
            password="StrongPass123",
        )

    def test_token_pair_issued_for_email_login(self) -> None:
        response = self.client.post(
            reverse("auth:token_obtain_pair"),
            {"email": "advertiser@example.com", "password": "StrongPass123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

    def test_token_refused_for_wrong_password(self) -> None:
        response = self.client.post(
            reverse("auth:token_obtain_pair"),
            {"email": "advertiser@example.com", "password": "wrong"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_access_token_authenticates_me_endpoint(self) -> None:
        tokens = self.client.post(
            reverse("auth:token_obtain_pair"),
            {"email": "advertiser@example.com", "password": "StrongPass123"},
            format="json",
        ).data
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = self.client.get(reverse("auth:me"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["role"], User.RoleChoices.ADVERTISER)
        self.assertEqual(response.data["phone"], "+2250700000001")

    def test_me_requires_authentication(self) -> None:
        response = self.client.get(reverse("auth:me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_superuser_is_admin(self) -> None:
        admin = User.objects.create_superuser(email="root@example.com", password="RootPass123")
        self.assertEqual(admin.role, User.RoleChoices.ADMIN)
        self.assertTrue(admin.is_admin())
        self.assertFalse(self.user.is_admin())
